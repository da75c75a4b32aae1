#!/usr/bin/env python3
"""
CLI Script for Consistency Checking.

Usage:
    python scripts/check_consistency.py receipt.txt testimony.txt
    python scripts/check_consistency.py docs/*.txt --passes 3 --strategy intersection --theta 0.2
    python scripts/check_consistency.py --remerge run.json --theta 0.35
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

console = Console()


def render_findings(content: str, title: str) -> None:
    """Print the findings table."""
    from src.tables import is_empty_report, parse_table

    if is_empty_report(content):
        console.print("\n[yellow]No inconsistencies found.[/]")
        return

    table = parse_table(content)

    view = RichTable(title=title, show_header=True, header_style="bold red", show_lines=True)
    view.add_column("#", style="dim", width=3)
    view.add_column("Sources of Conflict", width=28)
    view.add_column("Nature of Inconsistency", width=40)
    view.add_column("Recommended Fix", width=50)

    for i, finding in enumerate(table, 1):
        view.add_row(
            str(i),
            "\n".join(finding.source_list),
            finding.nature,
            finding.recommended_fix,
        )

    console.print(view)


def render_traces(traces) -> None:  # type: ignore[no-untyped-def]
    """Print one panel per merge step."""
    for step, trace in enumerate(traces, 1):
        lines = [
            f"Rows A: {trace.total_rows_a} | Rows B: {trace.total_rows_b} | "
            f"Matches: {trace.matches_found} | theta={trace.theta}",
        ]
        for match in trace.matches:
            lines.append(
                f"  [green]{match.similarity:.3f}[/]  {match.row_a.recommended_fix[:60]}"
                f"  <->  {match.row_b.recommended_fix[:60]}"
            )
        console.print(Panel("\n".join(lines), title=f"Merge step {step}", border_style="blue"))


async def run_analysis(args: argparse.Namespace) -> int:
    """Run the analysis pipeline."""
    from src.analysis import build_request, run_consistency_analysis
    from src.providers import format_cost

    documents: list[tuple[str, str]] = []
    for path in args.files:
        if not path.exists():
            console.print(f"[red]File not found: {path}[/]")
            return 1
        documents.append((path.name, path.read_text(encoding="utf-8")))

    request = build_request(
        documents,
        emphasis=args.emphasis,
        provider=args.provider,
        model=args.model,
        passes=args.passes,
        strategy=args.strategy,
        theta=args.theta,
    )

    console.print(f"\n[bold blue]Running {request.number_of_passes} pass(es)...[/]")
    console.print(f"  Model: {request.provider_id.value} / {request.model}")
    if request.is_multi_pass:
        console.print(f"  Strategy: {request.strategy.value} (theta={request.theta})")

    def on_progress(stage: str, number: int | None, total: int | None) -> None:
        suffix = f" {number}/{total}" if number and total else ""
        console.print(f"  [dim]{stage}{suffix}[/]")

    result = await run_consistency_analysis(request, on_progress=on_progress)

    for failure in result.failures:
        console.print(f"  [yellow]Pass {failure.pass_index} failed ({failure.kind.value}): {failure.message}[/]")

    if result.all_passes_failed:
        console.print("\n[red]Every pass failed; no report produced.[/]")
        return 2

    render_findings(result.content, "Inconsistencies")
    render_traces(result.merge_traces)

    console.print(
        f"\n{result.inconsistency_count} inconsistencies | "
        f"cost {format_cost(result.total_cost)} | {result.total_tokens} tokens"
    )

    if args.output:
        args.output.write_text(result.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"[dim]Run saved to {args.output}[/]")

    return 0


def run_remerge(args: argparse.Namespace) -> int:
    """Re-merge a saved run at a new theta."""
    from app.config import PassStrategy
    from src.analysis import remerge

    saved = json.loads(args.remerge.read_text(encoding="utf-8"))
    strategy = args.strategy or PassStrategy(saved.get("strategy", "intersection"))
    theta = args.theta if args.theta is not None else saved.get("theta", 0.2)

    content, traces = remerge(saved.get("raw_results", []), strategy, theta)

    console.print(f"\n[bold blue]Re-merged {len(saved.get('raw_results', []))} passes[/] "
                  f"({strategy.value}, theta={theta})")
    render_findings(content, "Inconsistencies (re-merged)")
    render_traces(traces)
    return 0


def main() -> None:
    """Main entry point."""
    from app.config import AnalysisEmphasis, ModelProviderId, PassStrategy, get_settings
    from src.utils.logger import setup_logging

    parser = argparse.ArgumentParser(
        description="Find factual contradictions across documents"
    )
    parser.add_argument(
        "files",
        type=Path,
        nargs="*",
        help="Plain-text documents to analyze",
    )
    parser.add_argument("--passes", "-n", type=int, default=None, help="Number of analysis passes")
    parser.add_argument(
        "--strategy", "-s",
        type=PassStrategy,
        choices=list(PassStrategy),
        default=None,
        help="How to reconcile passes (intersection or union)",
    )
    parser.add_argument("--theta", "-t", type=float, default=None, help="Similarity threshold (0-1)")
    parser.add_argument(
        "--emphasis", "-e",
        type=AnalysisEmphasis,
        choices=list(AnalysisEmphasis),
        default=None,
        help="Bias toward recall or precision",
    )
    parser.add_argument("--provider", type=ModelProviderId, choices=list(ModelProviderId), default=None)
    parser.add_argument("--model", "-m", type=str, default=None, help="Model name")
    parser.add_argument("--output", "-o", type=Path, default=None, help="Save the run as JSON")
    parser.add_argument("--remerge", type=Path, default=None, help="Re-merge a saved run JSON")

    args = parser.parse_args()
    setup_logging(get_settings().log_level)

    if args.theta is not None and not 0.0 <= args.theta <= 1.0:
        console.print("[red]Error: --theta must be between 0 and 1[/]")
        sys.exit(1)

    console.print("[bold]Multi-Pass Consistency Checker[/]")
    console.print("=" * 50)

    if args.remerge:
        sys.exit(run_remerge(args))

    if not args.files:
        console.print("[red]Error: at least one document is required[/]")
        sys.exit(1)

    sys.exit(asyncio.run(run_analysis(args)))


if __name__ == "__main__":
    main()
