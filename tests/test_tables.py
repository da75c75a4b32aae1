"""
Tests for the Findings Table Model.

Parsing never raises, serialization reproduces the load-bearing header,
and escaped cells survive a round trip.
"""

import pytest
from pydantic import ValidationError

from src.tables import (
    EMPTY_TABLE_MARKDOWN,
    TABLE_HEADER,
    TABLE_SEPARATOR,
    Finding,
    Table,
    add_table_numbering,
    clean_to_table_only,
    count_inconsistencies,
    is_empty_report,
    parse_table,
    remove_table_numbering,
    serialize_table,
)
from tests.conftest import HEADER, make_output


# ============================================================================
# Finding Schema Tests
# ============================================================================

class TestFinding:
    """Tests for the Finding schema."""

    def test_newlines_become_line_breaks(self) -> None:
        """Test embedded newlines are stored as <br> markers."""
        finding = Finding(
            sources="Receipt\nTestimony",
            nature="Date conflict\r\nJune 22 vs June 24",
            recommended_fix="  Fix the testimony  ",
        )

        assert finding.sources == "Receipt<br>Testimony"
        assert finding.nature == "Date conflict<br>June 22 vs June 24"
        assert finding.recommended_fix == "Fix the testimony"

    def test_source_list_strips_ordinals(self) -> None:
        """Test sources are split on <br> and lose '1.' prefixes."""
        finding = Finding(
            sources="1. Hotel Receipt #4721<br>2. Jane Doe's Testimony",
            nature="Date conflict",
            recommended_fix="Fix it",
        )

        assert finding.source_list == ["Hotel Receipt #4721", "Jane Doe's Testimony"]

    def test_finding_is_immutable(self) -> None:
        """Test findings cannot be modified after creation."""
        finding = Finding(sources="A", nature="B", recommended_fix="C")

        with pytest.raises(ValidationError):
            finding.nature = "changed"  # type: ignore[misc]

    def test_table_behaves_like_sequence(self, sample_table: Table) -> None:
        """Test Table length, iteration and indexing."""
        assert len(sample_table) == 2
        assert list(sample_table)[0] == sample_table[0]
        assert sample_table.fixes[1] == "Change '$50' to '$55' in the witness statement"
        assert not sample_table.is_empty
        assert Table().is_empty


# ============================================================================
# Parse Tests
# ============================================================================

class TestParseTable:
    """Tests for parse_table."""

    def test_parse_model_output(self, sample_output: str) -> None:
        """Test parsing a table surrounded by prose."""
        table = parse_table(sample_output)

        assert len(table) == 3
        first = table[0]
        assert first.sources == "1. Hotel Receipt #4721<br>2. Jane Doe's Testimony"
        assert first.nature.startswith("Check-in date conflict")
        assert first.recommended_fix.startswith("**Jane Doe's Testimony**")

    def test_parse_preserves_row_order(self, sample_output: str) -> None:
        """Test rows come out in the order they were written."""
        table = parse_table(sample_output)

        assert [f.sources.split("<br>")[0] for f in table] == [
            "1. Hotel Receipt #4721",
            "Restaurant Receipt",
            "Police Report",
        ]

    @pytest.mark.parametrize("text", ["", "   \n  ", None, "No inconsistencies were found."])
    def test_parse_empty_or_prose(self, text: str | None) -> None:
        """Test that inputs without a table yield an empty Table."""
        assert parse_table(text).is_empty

    def test_parse_requires_header(self) -> None:
        """Test that pipe rows without the findings header are ignored."""
        text = "| Name | Role | Equity |\n|---|---|---|\n| John | CEO | 5% |"

        assert parse_table(text).is_empty

    def test_parse_drops_short_rows(self) -> None:
        """Test rows with fewer than three non-empty cells are dropped."""
        text = make_output(
            "| Receipt | Date conflict |",
            "| Receipt |  | Fix it |",
            "| Receipt | Date conflict | Fix it |",
        )

        table = parse_table(text)

        assert len(table) == 1
        assert table[0].recommended_fix == "Fix it"

    def test_parse_ignores_non_pipe_lines(self) -> None:
        """Test prose after the header does not become rows."""
        text = make_output("| A | B | C |") + "\n\nThese are all the findings."

        assert len(parse_table(text)) == 1

    def test_parse_handles_alignment_separator(self) -> None:
        """Test colon-aligned separators are skipped."""
        text = (
            "| Sources of Conflict | Nature of Inconsistency | Recommended Fix |\n"
            "|:---|:---:|---:|\n"
            "| A | B | C |"
        )

        table = parse_table(text)

        assert len(table) == 1
        assert table[0].sources == "A"


# ============================================================================
# Serialize Tests
# ============================================================================

class TestSerializeTable:
    """Tests for serialize_table."""

    def test_serialize_empty_table(self) -> None:
        """Test an empty table renders as header and separator only."""
        assert serialize_table(Table()) == EMPTY_TABLE_MARKDOWN
        assert EMPTY_TABLE_MARKDOWN == f"{TABLE_HEADER}\n{TABLE_SEPARATOR}"

    def test_serialize_header_is_exact(self, sample_table: Table) -> None:
        """Test the header and separator lines are reproduced verbatim."""
        lines = serialize_table(sample_table).split("\n")

        assert lines[0] == "| Sources of Conflict | Nature of Inconsistency | Recommended Fix |"
        assert lines[1] == "|---|---|---|"
        assert len(lines) == 4

    def test_round_trip(self, sample_table: Table) -> None:
        """Test parse(serialize(t)) gives back the same findings."""
        assert parse_table(serialize_table(sample_table)) == sample_table

    def test_round_trip_with_pipes_and_newlines(self) -> None:
        """Test pipes are escaped and newlines kept as <br>."""
        table = Table(findings=(
            Finding(
                sources="Ledger A\nLedger B",
                nature="Column 'Q1 | Q2' totals differ",
                recommended_fix="Use 'a|b' notation consistently",
            ),
        ))

        text = serialize_table(table)

        assert "Q1 \\| Q2" in text
        assert parse_table(text) == table


# ============================================================================
# Clean & Helpers Tests
# ============================================================================

class TestTableHelpers:
    """Tests for cleaning, numbering and counting."""

    def test_clean_strips_preamble(self, sample_output: str) -> None:
        """Test prose before the table is removed."""
        cleaned = clean_to_table_only(sample_output)

        assert cleaned.startswith("| Sources of Conflict")
        assert "Here is my analysis" not in cleaned
        assert parse_table(cleaned) == parse_table(sample_output)

    def test_clean_without_table_returns_input(self) -> None:
        """Test text without a table comes back unchanged."""
        text = "The documents are consistent."

        assert clean_to_table_only(text) == text

    def test_is_empty_report(self, sample_output: str) -> None:
        """Test empty-report detection."""
        assert is_empty_report(EMPTY_TABLE_MARKDOWN)
        assert is_empty_report(HEADER)
        assert is_empty_report("Nothing to report")
        assert not is_empty_report(sample_output)

    def test_count_inconsistencies(self, sample_table: Table) -> None:
        """Test counting data rows."""
        assert count_inconsistencies(serialize_table(sample_table)) == 2
        assert count_inconsistencies(EMPTY_TABLE_MARKDOWN) == 0
        assert count_inconsistencies("no table") == 0

    def test_numbering_round_trip(self, sample_table: Table) -> None:
        """Test adding and removing the Item # column."""
        markdown = serialize_table(sample_table)

        numbered = add_table_numbering(markdown)

        assert numbered.startswith("| Item # | Sources of Conflict")
        assert "| **1** |" in numbered
        assert "| **2** |" in numbered
        assert remove_table_numbering(numbered).strip() == markdown
