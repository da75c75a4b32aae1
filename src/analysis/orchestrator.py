"""
Pass Orchestrator - Multi-Pass Analysis & Reconciliation.

Runs N independent analysis passes over the same case file, each with its
own randomized instruction prefix, then reconciles them:

1. Union: every finding from every pass, exact repeats removed
2. Intersection: progressive fold A+B -> A', A'+C -> A'' keeping only
   findings corroborated by each newer pass (TF-IDF matcher)

Passes run strictly one after another, in index order. A failed pass is
logged and skipped; a run never raises because a model call failed.
Raw pass outputs are kept so the result can be re-merged at another theta
without calling the model again (see remerge()).
"""

import random
import time
from collections.abc import Callable, Sequence

from app.config import PassStrategy
from src.analysis.prompts import build_pass_prefix, build_user_message
from src.analysis.schemas import (
    AnalysisPass,
    AnalysisRequest,
    AnalysisResult,
    PassFailure,
    RunStage,
    RunState,
)
from src.merging.matcher import match_tables
from src.merging.schemas import MergeTrace
from src.merging.union import union_merge_text
from src.providers.catalog import calculate_cost
from src.providers.model_client import (
    ChatTurn,
    FailureKind,
    ModelInvocationError,
    ModelInvoker,
    ModelRequest,
    classify_failure,
)
from src.tables.markdown import clean_to_table_only, parse_table, serialize_table
from src.tables.schemas import EMPTY_TABLE_MARKDOWN, Table
from src.utils.logger import LogContext, get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]
CostCallback = Callable[[float, int], None]
CostFunction = Callable[[str, str, int, int], float]


# ============================================================================
# Reconciliation (pure, no I/O)
# ============================================================================

def fold_intersection(
    raw_results: Sequence[str],
    theta: float,
    on_progress: ProgressCallback | None = None,
) -> tuple[str, list[MergeTrace]]:
    """
    Progressively intersect pass outputs in order.

    Args:
        raw_results: Raw pass outputs, in pass order
        theta: Inclusive similarity threshold
        on_progress: Optional progress callback

    Returns:
        Tuple of (final content, one trace per merge step)
    """
    if not raw_results:
        return EMPTY_TABLE_MARKDOWN, []

    if len(raw_results) == 1:
        return raw_results[0], []

    running: Table = parse_table(clean_to_table_only(raw_results[0]))
    traces: list[MergeTrace] = []
    steps = len(raw_results) - 1

    for step, raw in enumerate(raw_results[1:], 1):
        if on_progress:
            on_progress("Merging results with TF-IDF", step, steps)

        try:
            incoming = parse_table(clean_to_table_only(raw))
            merged, trace = match_tables(running, incoming, theta)
        except Exception as e:
            # Keep the pre-merge consensus and move on to the next pass
            logger.error(f"Merge step {step}/{steps} failed, keeping previous result: {e}")
            continue

        logger.info(
            f"Merge step {step}/{steps}: kept {trace.matches_found} of "
            f"{trace.total_rows_a} rows (theta={theta})"
        )
        running = merged
        traces.append(trace)

    return serialize_table(running), traces


def reconcile(
    raw_results: Sequence[str],
    strategy: PassStrategy,
    theta: float,
    on_progress: ProgressCallback | None = None,
) -> tuple[str, list[MergeTrace]]:
    """Combine raw pass outputs with the given strategy."""
    if PassStrategy(strategy) is PassStrategy.UNION:
        return serialize_table(union_merge_text(raw_results)), []
    return fold_intersection(raw_results, theta, on_progress)


def remerge(
    raw_results: Sequence[str],
    strategy: PassStrategy = PassStrategy.INTERSECTION,
    theta: float = 0.2,
) -> tuple[str, list[MergeTrace]]:
    """
    Re-reconcile retained pass outputs, e.g. at a new theta.

    Never calls the model.
    """
    logger.info(f"Re-merging {len(raw_results)} raw results ({PassStrategy(strategy).value}, theta={theta})")
    return reconcile(raw_results, strategy, theta)


# ============================================================================
# Orchestrator
# ============================================================================

def _advance(state: RunState, stage: RunStage) -> RunState:
    logger.debug(f"Run {state.run_id}: {state.stage.value} -> {stage.value}")
    return state.enter(stage)


class PassOrchestrator:
    """
    Drives a multi-pass analysis run.

    Usage:
        orchestrator = PassOrchestrator(LlamaIndexModelInvoker())
        result = await orchestrator.run(request)
    """

    def __init__(
        self,
        invoker: ModelInvoker,
        cost_fn: CostFunction = calculate_cost,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            invoker: Model-invocation collaborator
            cost_fn: (provider, model, input_tokens, output_tokens) -> cost
        """
        self.invoker = invoker
        self.cost_fn = cost_fn

    async def run(
        self,
        request: AnalysisRequest,
        on_progress: ProgressCallback | None = None,
        on_cost: CostCallback | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], float] | None = None,
    ) -> AnalysisResult:
        """
        Run the analysis described by the request.

        Args:
            request: Prompt, content, model and multi-pass settings
            on_progress: Called with (stage, pass number, total)
            on_cost: Called with (cost, tokens) after each successful call
            rng: Entropy for prefix selection (defaults to a fresh Random)
            clock: Seconds-since-epoch source (defaults to time.time)

        Returns:
            AnalysisResult with the final table, totals and traces
        """
        rng = rng or random.Random()
        clock = clock or time.time
        run_id = f"{int(clock() * 1000)}-{rng.randrange(10000)}"
        state = RunState(run_id=run_id)

        with LogContext(run_id=run_id):
            logger.info(
                f"Starting run {run_id}: {request.number_of_passes} pass(es), "
                f"{request.strategy.value} strategy, model {request.model}"
            )

            if not request.is_multi_pass:
                return await self._run_single(request, state, on_progress, on_cost)

            state = _advance(state, RunStage.RUNNING_PASSES)
            seed = rng.randrange(10000)
            timestamp = int(clock() * 1000)

            for pass_index in range(1, request.number_of_passes + 1):
                if on_progress:
                    on_progress("Running analysis pass", pass_index, request.number_of_passes)

                prefix = build_pass_prefix(pass_index, request.number_of_passes, seed, timestamp)
                state = await self._run_pass(
                    request,
                    state,
                    pass_index=pass_index,
                    prompt_prefix=prefix.text,
                    temperature=request.temperatures.multi_pass,
                    on_cost=on_cost,
                )

            if request.strategy is PassStrategy.INTERSECTION and len(state.passes) >= 2:
                state = _advance(state, RunStage.MERGING)

            content, traces = reconcile(state.raw_results, request.strategy, request.theta, on_progress)
            for trace in traces:
                state = state.with_trace(trace)

            return self._finish(state, content, request)

    async def _run_single(
        self,
        request: AnalysisRequest,
        state: RunState,
        on_progress: ProgressCallback | None,
        on_cost: CostCallback | None,
    ) -> AnalysisResult:
        """One call; its raw output is the final content."""
        if on_progress:
            on_progress("Running analysis...", None, None)

        state = await self._run_pass(
            request,
            state,
            pass_index=1,
            prompt_prefix="",
            temperature=request.temperatures.single_pass,
            on_cost=on_cost,
        )
        content = state.passes[0].raw_output if state.passes else EMPTY_TABLE_MARKDOWN
        return self._finish(state, content, request)

    async def _run_pass(
        self,
        request: AnalysisRequest,
        state: RunState,
        pass_index: int,
        prompt_prefix: str,
        temperature: float,
        on_cost: CostCallback | None,
    ) -> RunState:
        """Invoke the model once and fold the outcome into the state."""
        model_request = ModelRequest(
            provider_id=request.provider_id,
            api_key=request.api_key,
            model=request.model,
            messages=[ChatTurn(
                role="user",
                content=build_user_message(prompt_prefix + request.base_prompt, request.content),
            )],
            temperature=temperature,
        )

        try:
            response = await self.invoker.invoke(model_request)
            if not response.text.strip():
                raise ModelInvocationError(FailureKind.EMPTY_RESPONSE, "Model returned an empty response")
        except Exception as e:
            kind = classify_failure(e)
            logger.warning(f"Pass {pass_index} failed ({kind.value}): {e}")
            return state.with_failure(PassFailure(
                pass_index=pass_index,
                kind=kind,
                message=str(e),
            ))

        try:
            cost = self.cost_fn(
                request.provider_id.value,
                request.model,
                response.usage.input_tokens,
                response.usage.output_tokens,
            )
        except Exception as e:
            logger.warning(f"Pass {pass_index}: cost calculation failed, counting $0: {e}")
            cost = 0.0
        if on_cost:
            on_cost(cost, response.usage.total_tokens)

        logger.info(
            f"Pass {pass_index} complete: {response.usage.total_tokens} tokens, ${cost:.5f}"
        )

        return state.with_pass(AnalysisPass(
            pass_index=pass_index,
            prompt_prefix=prompt_prefix,
            temperature=temperature,
            raw_output=response.text,
            usage=response.usage,
            cost=cost,
        ))

    def _finish(self, state: RunState, content: str, request: AnalysisRequest) -> AnalysisResult:
        state = _advance(state, RunStage.DONE)

        if not state.passes:
            logger.error(f"Run {state.run_id}: all {len(state.failures)} pass(es) failed")
        else:
            logger.info(
                f"Run {state.run_id} complete. Total cost: ${state.total_cost:.4f}, "
                f"Total tokens: {state.total_tokens}"
            )

        return AnalysisResult.from_state(state, content, request.strategy, request.theta)
