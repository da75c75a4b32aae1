"""
Pytest Configuration and Fixtures.

Model calls go through ScriptedInvoker, an in-process ModelInvoker that
replays canned pass outputs. Tests that talk to a real provider are
skipped unless one is available.
"""

import asyncio
import os
from collections.abc import Iterable

import pytest

from src.providers.model_client import (
    FailureKind,
    ModelInvocationError,
    ModelRequest,
    ModelResponse,
    TokenUsage,
)
from src.tables.schemas import Finding, Table


# ============================================================================
# Skip Markers
# ============================================================================

def _ollama_running() -> bool:
    try:
        import httpx
        response = httpx.get("http://localhost:11434/api/tags", timeout=2.0)
        return response.status_code == 200
    except Exception:
        return False


def requires_llm():
    """Skip test if no LLM backend is available."""
    has_openai = bool(os.getenv("OPENAI_API_KEY"))

    return pytest.mark.skipif(
        not (has_openai or _ollama_running()),
        reason="Requires LLM backend (Ollama or OpenAI)"
    )


def requires_ollama():
    """Skip test if Ollama is not running."""
    return pytest.mark.skipif(
        not _ollama_running(),
        reason="Requires Ollama running on localhost:11434"
    )


# ============================================================================
# Scripted Model Invoker
# ============================================================================

class ScriptedInvoker:
    """
    ModelInvoker that answers from a script.

    Each script entry is either the text of a response or an exception to
    raise. Every request is recorded in .requests. A delay makes each
    call yield to the event loop first.
    """

    def __init__(
        self,
        script: Iterable[str | Exception],
        usage: TokenUsage | None = None,
        delay: float = 0.0,
    ) -> None:
        self.script = list(script)
        self.delay = delay
        self.usage = usage or TokenUsage(input_tokens=1000, output_tokens=200, total_tokens=1200)
        self.requests: list[ModelRequest] = []

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        self.requests.append(request)
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.script:
            raise ModelInvocationError(FailureKind.PROVIDER_ERROR, "Script exhausted")

        step = self.script.pop(0)
        if isinstance(step, Exception):
            raise step
        return ModelResponse(text=step, usage=self.usage)

    @property
    def prompts(self) -> list[str]:
        return [r.messages[-1].content for r in self.requests]


# ============================================================================
# Table Fixtures
# ============================================================================

RECEIPT_ROW = (
    "| 1. Hotel Receipt #4721<br>2. Jane Doe's Testimony "
    "| Check-in date conflict: Receipt dated June 22, testimony states June 24 "
    "| **Jane Doe's Testimony**: Change 'June 24' to 'June 22' to match Hotel Receipt #4721 |"
)

DINNER_ROW = (
    "| Restaurant Receipt<br>Witness Statement "
    "| Amount conflict: receipt shows $55, witness says $50 "
    "| **Witness Statement**: Change '$50' to '$55' to match Restaurant Receipt |"
)

LOCATION_ROW = (
    "| Police Report<br>Driver Statement "
    "| Location conflict: report says Main Street, driver says Oak Avenue "
    "| **Driver Statement**: Change 'Oak Avenue' to 'Main Street' to match Police Report |"
)

HEADER = (
    "| Sources of Conflict | Nature of Inconsistency | Recommended Fix |\n"
    "|---|---|---|"
)


def make_output(*rows: str, preamble: str = "") -> str:
    """Model output with an optional prose preamble and the given rows."""
    table = "\n".join([HEADER, *rows])
    return f"{preamble}\n\n{table}" if preamble else table


@pytest.fixture
def receipt_finding() -> Finding:
    return Finding(
        sources="Receipt",
        nature="Date conflict: June 22 vs June 24",
        recommended_fix="Change testimony to June 22 to match Receipt",
    )


@pytest.fixture
def testimony_finding() -> Finding:
    return Finding(
        sources="Testimony",
        nature="Check-in date discrepancy",
        recommended_fix="Update testimony date to June 22 per receipt",
    )


@pytest.fixture
def sample_table() -> Table:
    """Two-row findings table."""
    return Table(findings=(
        Finding(
            sources="Hotel Receipt<br>Testimony",
            nature="Date conflict",
            recommended_fix="Change 'June 24' to 'June 22' in the testimony",
        ),
        Finding(
            sources="Restaurant Receipt<br>Witness Statement",
            nature="Amount conflict",
            recommended_fix="Change '$50' to '$55' in the witness statement",
        ),
    ))


@pytest.fixture
def sample_output() -> str:
    """Raw model output with prose around a three-row table."""
    return make_output(
        RECEIPT_ROW,
        DINNER_ROW,
        LOCATION_ROW,
        preamble="Here is my analysis of the case file.",
    )


@pytest.fixture
def pass_outputs() -> list[str]:
    """Three pass outputs that agree on the receipt date conflict."""
    return [
        make_output(RECEIPT_ROW, DINNER_ROW, preamble="Pass one findings:"),
        make_output(RECEIPT_ROW, LOCATION_ROW),
        make_output(LOCATION_ROW, RECEIPT_ROW, preamble="Findings below."),
    ]


@pytest.fixture
def sample_documents() -> list[tuple[str, str]]:
    return [
        ("Hotel Receipt #4721", "Guest: Jane Doe. Check-in: June 22, 2024. Total: $55."),
        ("Jane Doe's Testimony", "I checked in on June 24, 2024 and paid $50 for dinner."),
    ]
