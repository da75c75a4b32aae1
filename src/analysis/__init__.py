"""
Analysis Layer - Multi-Pass Orchestration.

Prompts, the pass orchestrator and its reconciliation strategies.
"""

from src.analysis.orchestrator import (
    PassOrchestrator,
    fold_intersection,
    reconcile,
    remerge,
)
from src.analysis.prompts import (
    DEFAULT_PROMPT,
    PassPrefix,
    add_emphasis_to_prompt,
    build_case_file,
    build_pass_prefix,
    get_emphasis_description,
)
from src.analysis.runner import (
    AnalysisInputError,
    build_request,
    run_consistency_analysis,
)
from src.analysis.schemas import (
    AnalysisPass,
    AnalysisRequest,
    AnalysisResult,
    PassFailure,
    RunStage,
    RunState,
    TemperatureSettings,
)

__all__ = [
    # Orchestration
    "PassOrchestrator",
    "fold_intersection",
    "reconcile",
    "remerge",
    "run_consistency_analysis",
    "build_request",
    "AnalysisInputError",
    # Prompts
    "DEFAULT_PROMPT",
    "PassPrefix",
    "build_pass_prefix",
    "build_case_file",
    "add_emphasis_to_prompt",
    "get_emphasis_description",
    # Schemas
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisPass",
    "PassFailure",
    "RunStage",
    "RunState",
    "TemperatureSettings",
]
