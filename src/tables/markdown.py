"""
Markdown Table Codec.

Reads the three-column findings table out of free-form model output and
writes it back. Parsing is forgiving by contract: anything that is not a
recognisable findings table yields an empty Table, never an exception.
"""

import re

from src.tables.schemas import (
    EMPTY_TABLE_MARKDOWN,
    TABLE_COLUMNS,
    TABLE_HEADER,
    TABLE_SEPARATOR,
    Finding,
    Table,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)


# Cells are split on pipes that are not escaped as "\|"
_CELL_DELIMITER = re.compile(r"(?<!\\)\|")
_SEPARATOR_LINE = re.compile(r"^\s*\|?[\s:|]*-{3,}[\s\-:|]*$")

# A pipe-delimited block running until the next blank line or end of text
_TABLE_BLOCK = re.compile(
    r"\|[\s\S]*?\|[\s\S]*?\|[\s\S]*?\|[\s\S]*?\|[\s\S]*?(?=\n\n|\Z)"
)

# Header + separator followed by one or more pipe rows
_NUMBERABLE_TABLE = re.compile(
    r"(\|[^\n]+\|\n\|[-\s|:]+\|\n)((\|[^\n]+\|\n?)+)",
    re.MULTILINE,
)
_DATA_ROWS = re.compile(
    r"\|[^\n]+\|\n\|[-\s|:]+\|\n((\|[^\n]+\|\n?)+)",
    re.MULTILINE,
)


# ============================================================================
# Parsing
# ============================================================================

def _is_header(line: str) -> bool:
    return TABLE_COLUMNS[0] in line and TABLE_COLUMNS[1] in line


def _is_separator(line: str) -> bool:
    return bool(_SEPARATOR_LINE.match(line))


def _split_cells(line: str) -> list[str]:
    """Split a row on unescaped pipes, dropping empty cells."""
    cells = []
    for raw in _CELL_DELIMITER.split(line):
        cell = raw.strip().replace("\\|", "|")
        if cell:
            cells.append(cell)
    return cells


def parse_table(text: str | None) -> Table:
    """
    Parse the findings table out of model output.

    Lines after the header that start with a pipe are data rows. Rows
    need at least three non-empty cells; shorter rows are dropped.

    Args:
        text: Raw model output (may contain prose around the table)

    Returns:
        Parsed Table (empty if no table was found)
    """
    if not isinstance(text, str) or not text.strip():
        return Table()

    findings: list[Finding] = []
    in_table = False
    dropped = 0

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        if _is_header(stripped):
            in_table = True
            continue

        if not in_table or _is_separator(stripped):
            continue

        if not stripped.startswith("|"):
            continue

        cells = _split_cells(stripped)
        if len(cells) < 3:
            dropped += 1
            continue

        finding = Finding(sources=cells[0], nature=cells[1], recommended_fix=cells[2])
        if finding.is_valid:
            findings.append(finding)
        else:
            dropped += 1

    if dropped:
        logger.debug(f"Dropped {dropped} malformed table rows")

    return Table(findings=tuple(findings))


# ============================================================================
# Serialization
# ============================================================================

def _escape_cell(value: str) -> str:
    return value.replace("|", "\\|")


def serialize_table(table: Table) -> str:
    """
    Render a Table as markdown with the fixed header.

    Pipes inside cells are escaped so the output parses back to the
    same findings. An empty table renders as header and separator only.
    """
    lines = [TABLE_HEADER, TABLE_SEPARATOR]
    for finding in table.findings:
        lines.append(
            f"| {_escape_cell(finding.sources)} "
            f"| {_escape_cell(finding.nature)} "
            f"| {_escape_cell(finding.recommended_fix)} |"
        )
    return "\n".join(lines)


def clean_to_table_only(text: str) -> str:
    """
    Strip prose around the first markdown table block.

    Returns the input unchanged when no table-shaped text is found.
    """
    match = _TABLE_BLOCK.search(text)
    return match.group(0) if match else text


def is_empty_report(text: str) -> bool:
    """True if the text holds no parseable findings."""
    return text.strip() == EMPTY_TABLE_MARKDOWN or parse_table(text).is_empty


# ============================================================================
# Display helpers
# ============================================================================

def add_table_numbering(markdown: str) -> str:
    """Prefix every markdown table with an 'Item #' column of row numbers."""

    def _number(match: re.Match[str]) -> str:
        header_lines = match.group(1).strip().split("\n")
        content_lines = [
            line for line in match.group(2).strip().split("\n") if line.strip()
        ]
        if len(header_lines) < 2:
            return match.group(0)

        header = re.sub(r"^\|", "| Item # |", header_lines[0])
        separator = re.sub(r"^\|", "|:---:|", header_lines[1])
        rows = [
            re.sub(r"^\|", f"| **{index}** |", line)
            for index, line in enumerate(content_lines, 1)
        ]
        return "\n".join([header, separator, *rows]) + "\n"

    return _NUMBERABLE_TABLE.sub(_number, markdown)


def remove_table_numbering(markdown: str) -> str:
    """Undo add_table_numbering."""
    result = markdown.replace("| Item # |", "|").replace("|:---:|", "|")
    return re.sub(r"\| \*\*\d+\*\* \|", "|", result)


def count_inconsistencies(markdown: str) -> int:
    """Count data rows across every markdown table in the text."""
    total = 0
    for match in _DATA_ROWS.finditer(markdown):
        rows = [
            line for line in match.group(1).strip().split("\n")
            if line.strip() and "|" in line
        ]
        total += len(rows)
    return total
