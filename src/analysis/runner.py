"""
Consistency Analysis Runner.

Glue between settings, documents and the PassOrchestrator: assembles the
case file, applies the emphasis to the prompt and fills unset options from
the application settings.
"""

from collections.abc import Iterable

from app.config import AnalysisEmphasis, ModelProviderId, PassStrategy, get_settings
from src.analysis.orchestrator import CostCallback, PassOrchestrator, ProgressCallback
from src.analysis.prompts import DEFAULT_PROMPT, add_emphasis_to_prompt, build_case_file
from src.analysis.schemas import AnalysisRequest, AnalysisResult, TemperatureSettings
from src.providers.catalog import get_provider
from src.providers.model_client import LlamaIndexModelInvoker, ModelInvoker
from src.utils.logger import get_logger

logger = get_logger(__name__)


class AnalysisInputError(Exception):
    """Raised when an analysis is requested without usable input."""
    pass


def build_request(
    documents: Iterable[tuple[str, str]],
    *,
    prompt: str | None = None,
    emphasis: AnalysisEmphasis | None = None,
    provider: ModelProviderId | None = None,
    model: str | None = None,
    api_key: str | None = None,
    passes: int | None = None,
    strategy: PassStrategy | None = None,
    theta: float | None = None,
    temperatures: TemperatureSettings | None = None,
) -> AnalysisRequest:
    """
    Build an AnalysisRequest, defaulting every unset option from settings.

    Raises:
        AnalysisInputError: If no documents were supplied
    """
    documents = list(documents)
    if not documents:
        raise AnalysisInputError("No documents supplied")

    settings = get_settings()
    emphasis = emphasis or settings.analysis_emphasis
    provider = provider or settings.llm_provider

    # The configured model belongs to the configured provider
    if not model:
        if provider == settings.llm_provider:
            model = settings.llm_model
        else:
            model = get_provider(provider).default_model

    return AnalysisRequest(
        base_prompt=add_emphasis_to_prompt(prompt or DEFAULT_PROMPT, emphasis),
        content=build_case_file(documents),
        provider_id=provider,
        api_key=api_key,
        model=model,
        number_of_passes=passes or settings.number_of_passes,
        strategy=strategy or settings.pass_strategy,
        temperatures=temperatures or TemperatureSettings(
            single_pass=settings.single_pass_temperature,
            multi_pass=settings.multi_pass_temperature,
        ),
        theta=settings.merge_theta if theta is None else theta,
    )


async def run_consistency_analysis(
    request: AnalysisRequest,
    invoker: ModelInvoker | None = None,
    on_progress: ProgressCallback | None = None,
    on_cost: CostCallback | None = None,
) -> AnalysisResult:
    """Run an analysis with the given (or the default LlamaIndex) invoker."""
    orchestrator = PassOrchestrator(invoker or LlamaIndexModelInvoker())
    result = await orchestrator.run(request, on_progress=on_progress, on_cost=on_cost)

    if result.all_passes_failed:
        logger.warning("Analysis produced no output: every pass failed")

    return result
