"""
Merge Layer - Reconciling Findings Across Passes.

- Matcher: similarity-based, asymmetric intersection of two tables
- Union Reducer: concatenation with exact-fix deduplication
"""

from src.merging.matcher import match_tables, merge_tables_text
from src.merging.schemas import TFIDF_APPROACH, MatchDetail, MergeTrace
from src.merging.union import union_merge, union_merge_text

__all__ = [
    "match_tables",
    "merge_tables_text",
    "union_merge",
    "union_merge_text",
    "MatchDetail",
    "MergeTrace",
    "TFIDF_APPROACH",
]
