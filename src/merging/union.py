"""
Union Reducer - Generous Multi-Pass Combination.

Concatenates findings from every pass and collapses only exact repeats of
the recommended fix (case and surrounding whitespace ignored). Near
duplicates survive as separate findings.
"""

from collections.abc import Iterable

from src.tables.markdown import parse_table
from src.tables.schemas import Finding, Table
from src.utils.logger import get_logger

logger = get_logger(__name__)


def _dedup_key(finding: Finding) -> str:
    return finding.recommended_fix.strip().lower()


def union_merge(tables: Iterable[Table]) -> Table:
    """Concatenate tables in order, first occurrence of each fix wins."""
    seen: set[str] = set()
    rows: list[Finding] = []
    total = 0

    for table in tables:
        for finding in table.findings:
            total += 1
            key = _dedup_key(finding)
            if key in seen:
                continue
            seen.add(key)
            rows.append(finding)

    if total:
        logger.debug(f"Union kept {len(rows)} of {total} rows")

    return Table(findings=tuple(rows))


def union_merge_text(raw_outputs: Iterable[str]) -> Table:
    """Parse each raw pass output and union the resulting tables."""
    return union_merge(parse_table(output) for output in raw_outputs)
