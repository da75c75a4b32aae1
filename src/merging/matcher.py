"""
Matcher - Similarity-Based Table Intersection.

Keeps the rows of table A whose recommended fix is corroborated by some
row of table B. The comparison is one-sided: A is the running consensus,
B the newest pass, and only A's original rows ever come out.

Rows are compared on the Recommended Fix column only.
"""

from src.merging.schemas import MatchDetail, MergeTrace
from src.similarity.tfidf import TfIdfSpace, cosine_similarity
from src.tables.markdown import clean_to_table_only, parse_table
from src.tables.schemas import Table
from src.utils.logger import get_logger

logger = get_logger(__name__)


def _decision(matches: int, theta: float) -> str:
    return f"Found {matches} matching rows using TF-IDF with theta={theta}"


def match_tables(table_a: Table, table_b: Table, theta: float) -> tuple[Table, MergeTrace]:
    """
    Keep each row of A whose best match in B scores at least theta.

    Args:
        table_a: Running consensus table
        table_b: Table from the newer pass
        theta: Inclusive similarity threshold in [0, 1]

    Returns:
        Tuple of (kept rows of A in original order, merge trace)
    """
    if table_a.is_empty or table_b.is_empty:
        return Table(), MergeTrace(
            total_rows_a=len(table_a),
            total_rows_b=len(table_b),
            theta=theta,
            final_decision=_decision(0, theta),
        )

    fixes_a = table_a.fixes
    fixes_b = table_b.fixes
    space = TfIdfSpace(fixes_a + fixes_b)

    vectors_a = [space.vectorize(fix) for fix in fixes_a]
    vectors_b = [space.vectorize(fix) for fix in fixes_b]

    kept = []
    details: list[MatchDetail] = []

    for row_a, vector_a in zip(table_a.findings, vectors_a):
        best_index = 0
        best_score = cosine_similarity(vector_a, vectors_b[0])

        for index in range(1, len(vectors_b)):
            score = cosine_similarity(vector_a, vectors_b[index])
            if score > best_score:
                best_index, best_score = index, score

        if best_score >= theta:
            kept.append(row_a)
            details.append(MatchDetail(
                row_a=row_a,
                row_b=table_b.findings[best_index],
                similarity=best_score,
            ))

    logger.debug(
        f"Matched {len(kept)}/{len(table_a)} rows against {len(table_b)} (theta={theta})"
    )

    trace = MergeTrace(
        total_rows_a=len(table_a),
        total_rows_b=len(table_b),
        matches_found=len(details),
        theta=theta,
        matches=details,
        final_decision=_decision(len(details), theta),
    )
    return Table(findings=tuple(kept)), trace


def merge_tables_text(text_a: str, text_b: str, theta: float) -> tuple[Table, MergeTrace]:
    """Clean both outputs down to their tables, parse, then match."""
    table_a = parse_table(clean_to_table_only(text_a))
    table_b = parse_table(clean_to_table_only(text_b))
    return match_tables(table_a, table_b, theta)
