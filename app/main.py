"""
FastAPI Application Entry Point.

Multi-Pass Consistency Checker API.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from app.config import AnalysisEmphasis, ModelProviderId, PassStrategy, get_settings
from src.analysis import (
    AnalysisInputError,
    AnalysisResult,
    TemperatureSettings,
    build_request,
    remerge,
    run_consistency_analysis,
)
from src.providers import (
    PROVIDERS,
    LlamaIndexModelInvoker,
    ModelInvoker,
    check_ollama_connection,
    format_cost,
)
from src.tables import count_inconsistencies
from src.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)
settings = get_settings()

TEXT_EXTENSIONS = (".txt", ".md", ".markdown", ".json")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan events."""
    setup_logging(settings.log_level)
    logger.info("Starting Consistency Checker API...")
    logger.info(f"Provider: {settings.llm_provider.value} ({settings.llm_model})")
    yield
    logger.info("Shutting down Consistency Checker API...")


app = FastAPI(
    title="Multi-Pass Consistency Checker",
    description="Finds factual contradictions across documents with multi-pass LLM analysis",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_model_invoker() -> ModelInvoker:
    """Model invoker dependency (overridden in tests)."""
    return LlamaIndexModelInvoker()


# ============================================================================
# Request Schemas
# ============================================================================

class DocumentInput(BaseModel):
    """A plain-text document."""

    name: str = Field(..., min_length=1)
    content: str


class AnalyzeRequest(BaseModel):
    """Body of POST /analyze. Unset options fall back to settings."""

    documents: list[DocumentInput] = Field(..., min_length=1)
    prompt: str | None = None
    emphasis: AnalysisEmphasis | None = None
    provider: ModelProviderId | None = None
    model: str | None = None
    api_key: str | None = Field(default=None, repr=False)
    passes: int | None = Field(default=None, ge=1, le=5)
    strategy: PassStrategy | None = None
    theta: float | None = Field(default=None, ge=0.0, le=1.0)
    temperatures: TemperatureSettings | None = None


class RemergeRequest(BaseModel):
    """Body of POST /remerge."""

    raw_results: list[str] = Field(default_factory=list)
    strategy: PassStrategy = Field(default=PassStrategy.INTERSECTION)
    theta: float = Field(default=0.2, ge=0.0, le=1.0)


def _result_payload(result: AnalysisResult) -> dict[str, Any]:
    return {
        "status": "failed" if result.all_passes_failed else "success",
        "run_id": result.run_id,
        "content": result.content,
        "inconsistency_count": result.inconsistency_count,
        "strategy": result.strategy.value,
        "theta": result.theta,
        "total_cost": result.total_cost,
        "total_cost_display": format_cost(result.total_cost),
        "total_tokens": result.total_tokens,
        "all_passes_failed": result.all_passes_failed,
        "successful_passes": len(result.passes),
        "failures": [f.model_dump(mode="json") for f in result.failures],
        "merge_traces": [t.model_dump(mode="json") for t in result.merge_traces],
        "raw_results": result.raw_results,
    }


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/config")
async def get_config() -> dict[str, Any]:
    """Get current configuration (non-sensitive values only)."""
    return {
        "llm_provider": settings.llm_provider.value,
        "llm_model": settings.llm_model,
        "number_of_passes": settings.number_of_passes,
        "pass_strategy": settings.pass_strategy.value,
        "merge_theta": settings.merge_theta,
        "analysis_emphasis": settings.analysis_emphasis.value,
        "temperatures": {
            "single_pass": settings.single_pass_temperature,
            "multi_pass": settings.multi_pass_temperature,
        },
    }


@app.get("/providers")
async def list_providers() -> dict[str, Any]:
    """Provider catalogue with models and pricing."""
    return {
        "providers": [p.model_dump(mode="json") for p in PROVIDERS.values()],
    }


@app.get("/ollama/status")
async def ollama_status() -> dict[str, Any]:
    """Probe the configured local Ollama server."""
    status = await check_ollama_connection(settings.ollama_base_url)
    return status.model_dump()


@app.post("/analyze")
async def analyze(
    body: AnalyzeRequest,
    invoker: ModelInvoker = Depends(get_model_invoker),
) -> dict[str, Any]:
    """
    Run a single- or multi-pass consistency analysis.

    A run whose passes all failed still returns 200 with
    all_passes_failed=true and the empty table.
    """
    logger.info(f"Analysis requested for {len(body.documents)} documents")

    try:
        request = build_request(
            [(d.name, d.content) for d in body.documents],
            prompt=body.prompt,
            emphasis=body.emphasis,
            provider=body.provider,
            model=body.model,
            api_key=body.api_key,
            passes=body.passes,
            strategy=body.strategy,
            theta=body.theta,
            temperatures=body.temperatures,
        )
    except AnalysisInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await run_consistency_analysis(request, invoker)
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    return _result_payload(result)


@app.post("/analyze/upload")
async def analyze_upload(
    files: list[UploadFile] = File(...),
    passes: int | None = Form(default=None),
    strategy: PassStrategy | None = Form(default=None),
    theta: float | None = Form(default=None),
    invoker: ModelInvoker = Depends(get_model_invoker),
) -> dict[str, Any]:
    """Analyze uploaded plain-text documents with default settings."""
    documents: list[tuple[str, str]] = []

    for upload in files:
        name = upload.filename or f"Document {len(documents) + 1}"
        if not name.lower().endswith(TEXT_EXTENSIONS):
            raise HTTPException(status_code=400, detail=f"Unsupported file type: {name}")
        try:
            documents.append((name, (await upload.read()).decode("utf-8")))
        except UnicodeDecodeError:
            raise HTTPException(status_code=400, detail=f"File is not UTF-8 text: {name}")

    if theta is not None and not 0.0 <= theta <= 1.0:
        raise HTTPException(status_code=400, detail="theta must be between 0 and 1")

    try:
        request = build_request(documents, passes=passes, strategy=strategy, theta=theta)
    except AnalysisInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await run_consistency_analysis(request, invoker)
    except Exception as e:
        logger.error(f"Analysis failed: {e}")
        raise HTTPException(status_code=500, detail=f"Analysis failed: {str(e)}")

    return _result_payload(result)


@app.post("/remerge")
async def remerge_results(body: RemergeRequest) -> dict[str, Any]:
    """
    Re-reconcile retained raw pass outputs at a new theta.

    No model calls are made.
    """
    content, traces = remerge(body.raw_results, body.strategy, body.theta)
    return {
        "status": "success",
        "content": content,
        "inconsistency_count": count_inconsistencies(content),
        "strategy": body.strategy.value,
        "theta": body.theta,
        "merge_traces": [t.model_dump(mode="json") for t in traces],
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
