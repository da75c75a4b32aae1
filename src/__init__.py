"""
Multi-Pass Consistency Checker - Source Package.

This package contains the core functionality for:
- Findings-table parsing and serialization
- TF-IDF similarity scoring
- Intersection and union merging of pass outputs
- Model providers and the multi-pass orchestrator
- Utility functions
"""

from src.analysis import PassOrchestrator, remerge, run_consistency_analysis
from src.merging import match_tables, union_merge
from src.providers import LlamaIndexModelInvoker, calculate_cost
from src.similarity import TfIdfSpace
from src.tables import Finding, Table, parse_table, serialize_table

__all__ = [
    # Tables
    "Finding",
    "Table",
    "parse_table",
    "serialize_table",
    # Similarity
    "TfIdfSpace",
    # Merging
    "match_tables",
    "union_merge",
    # Providers
    "LlamaIndexModelInvoker",
    "calculate_cost",
    # Analysis
    "PassOrchestrator",
    "run_consistency_analysis",
    "remerge",
]
