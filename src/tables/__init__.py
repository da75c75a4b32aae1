"""
Table Model - Findings Table Parsing & Serialization.

The three-column markdown table every analysis pass must produce:
| Sources of Conflict | Nature of Inconsistency | Recommended Fix |
"""

from src.tables.markdown import (
    add_table_numbering,
    clean_to_table_only,
    count_inconsistencies,
    is_empty_report,
    parse_table,
    remove_table_numbering,
    serialize_table,
)
from src.tables.schemas import (
    EMPTY_TABLE_MARKDOWN,
    TABLE_HEADER,
    TABLE_SEPARATOR,
    Finding,
    Table,
)

__all__ = [
    # Schemas
    "Finding",
    "Table",
    "EMPTY_TABLE_MARKDOWN",
    "TABLE_HEADER",
    "TABLE_SEPARATOR",
    # Codec
    "parse_table",
    "serialize_table",
    "clean_to_table_only",
    "is_empty_report",
    # Display
    "add_table_numbering",
    "remove_table_numbering",
    "count_inconsistencies",
]
