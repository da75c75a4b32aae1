"""
Pydantic Schemas for the Analysis Layer.

Requests, captured passes, the run-state accumulator and the final result.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from app.config import ModelProviderId, PassStrategy
from src.merging.schemas import MergeTrace
from src.providers.model_client import FailureKind, TokenUsage
from src.tables.markdown import count_inconsistencies


class RunStage(str, Enum):
    """Orchestrator states."""

    IDLE = "idle"
    RUNNING_PASSES = "running_passes"
    MERGING = "merging"
    DONE = "done"


class TemperatureSettings(BaseModel):
    """Sampling temperatures for single- and multi-pass runs."""

    single_pass: float = Field(default=0.3, ge=0.0, le=2.0)
    multi_pass: float = Field(default=0.5, ge=0.0, le=2.0)


class AnalysisRequest(BaseModel):
    """Everything needed to run one analysis."""

    base_prompt: str = Field(..., description="Prompt shared by every pass")
    content: str = Field(..., description="Case file the prompt is applied to")
    provider_id: ModelProviderId = Field(default=ModelProviderId.OPENAI)
    api_key: str | None = Field(default=None, repr=False)
    model: str = Field(..., description="Model name")
    number_of_passes: int = Field(default=1, ge=1)
    strategy: PassStrategy = Field(default=PassStrategy.INTERSECTION)
    temperatures: TemperatureSettings = Field(default_factory=TemperatureSettings)
    theta: float = Field(default=0.2, ge=0.0, le=1.0)

    @property
    def is_multi_pass(self) -> bool:
        return self.number_of_passes > 1


class AnalysisPass(BaseModel):
    """One successful pass, immutable once captured."""

    model_config = ConfigDict(frozen=True)

    pass_index: int = Field(..., ge=1)
    prompt_prefix: str = Field(default="", description="Randomized prefix ('' for single pass)")
    temperature: float
    raw_output: str
    usage: TokenUsage = Field(default_factory=TokenUsage)
    cost: float = Field(default=0.0, ge=0.0)


class PassFailure(BaseModel):
    """A pass that was dropped."""

    model_config = ConfigDict(frozen=True)

    pass_index: int = Field(..., ge=1)
    kind: FailureKind
    message: str


class RunState(BaseModel):
    """
    Fold accumulator for one run.

    Each step returns a new RunState; nothing is mutated in place.
    """

    model_config = ConfigDict(frozen=True)

    run_id: str
    stage: RunStage = Field(default=RunStage.IDLE)
    passes: tuple[AnalysisPass, ...] = Field(default_factory=tuple)
    failures: tuple[PassFailure, ...] = Field(default_factory=tuple)
    merge_traces: tuple[MergeTrace, ...] = Field(default_factory=tuple)
    total_cost: float = Field(default=0.0, ge=0.0)
    total_tokens: int = Field(default=0, ge=0)

    def enter(self, stage: RunStage) -> "RunState":
        return self.model_copy(update={"stage": stage})

    def with_pass(self, analysis_pass: AnalysisPass) -> "RunState":
        return self.model_copy(update={
            "passes": (*self.passes, analysis_pass),
            "total_cost": self.total_cost + analysis_pass.cost,
            "total_tokens": self.total_tokens + analysis_pass.usage.total_tokens,
        })

    def with_failure(self, failure: PassFailure) -> "RunState":
        return self.model_copy(update={"failures": (*self.failures, failure)})

    def with_trace(self, trace: MergeTrace) -> "RunState":
        return self.model_copy(update={"merge_traces": (*self.merge_traces, trace)})

    @property
    def raw_results(self) -> list[str]:
        return [p.raw_output for p in self.passes]


class AnalysisResult(BaseModel):
    """Final output of a run."""

    run_id: str
    stage: RunStage = Field(default=RunStage.DONE)
    content: str = Field(..., description="Final findings table (markdown)")
    strategy: PassStrategy
    theta: float
    total_cost: float = Field(default=0.0, ge=0.0)
    total_tokens: int = Field(default=0, ge=0)
    merge_traces: list[MergeTrace] = Field(default_factory=list)
    raw_results: list[str] = Field(default_factory=list)
    passes: list[AnalysisPass] = Field(default_factory=list)
    failures: list[PassFailure] = Field(default_factory=list)
    all_passes_failed: bool = Field(
        default=False,
        description="True when no pass succeeded (distinguishes failure from 'nothing found')",
    )

    @property
    def inconsistency_count(self) -> int:
        return count_inconsistencies(self.content)

    @classmethod
    def from_state(cls, state: RunState, content: str, strategy: PassStrategy, theta: float) -> "AnalysisResult":
        return cls(
            run_id=state.run_id,
            stage=state.stage,
            content=content,
            strategy=strategy,
            theta=theta,
            total_cost=state.total_cost,
            total_tokens=state.total_tokens,
            merge_traces=list(state.merge_traces),
            raw_results=state.raw_results,
            passes=list(state.passes),
            failures=list(state.failures),
            all_passes_failed=not state.passes,
        )
