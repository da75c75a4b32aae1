"""
Pydantic Schemas for the Findings Table.

A Finding is one reported inconsistency row; a Table is an ordered,
immutable sequence of Findings under the fixed three-column header.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

TABLE_COLUMNS: tuple[str, str, str] = (
    "Sources of Conflict",
    "Nature of Inconsistency",
    "Recommended Fix",
)

TABLE_HEADER = "| " + " | ".join(TABLE_COLUMNS) + " |"
TABLE_SEPARATOR = "|---|---|---|"

# Header-only table, returned whenever there is nothing to report
EMPTY_TABLE_MARKDOWN = f"{TABLE_HEADER}\n{TABLE_SEPARATOR}"

_ORDINAL_PREFIX = re.compile(r"^\s*\d+\.\s*")
_LINE_BREAK = re.compile(r"<br\s*/?>", re.IGNORECASE)


class Finding(BaseModel):
    """
    One detected inconsistency.

    Findings carry no identifier. Two findings describe the same
    real-world issue only when the Matcher says so.
    """

    model_config = ConfigDict(frozen=True)

    sources: str = Field(..., description="Raw 'Sources of Conflict' cell text")
    nature: str = Field(..., description="What exactly conflicts")
    recommended_fix: str = Field(..., description="How to resolve the conflict")

    @field_validator("sources", "nature", "recommended_fix")
    @classmethod
    def _single_line(cls, value: str) -> str:
        # Cells are single-line; embedded newlines are kept as <br> markers
        return value.replace("\r\n", "\n").replace("\n", "<br>").strip()

    @property
    def source_list(self) -> list[str]:
        """Document labels with <br> breaks split and '1.' ordinals removed."""
        labels = []
        for part in _LINE_BREAK.split(self.sources):
            label = _ORDINAL_PREFIX.sub("", part).strip()
            if label:
                labels.append(label)
        return labels

    @property
    def is_valid(self) -> bool:
        return bool(self.sources.strip()) and bool(self.nature.strip())


class Table(BaseModel):
    """Ordered findings under the fixed three-column header."""

    model_config = ConfigDict(frozen=True)

    findings: tuple[Finding, ...] = Field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.findings)

    def __iter__(self):  # type: ignore[override]
        return iter(self.findings)

    def __getitem__(self, index: int) -> Finding:
        return self.findings[index]

    @property
    def is_empty(self) -> bool:
        return not self.findings

    @property
    def fixes(self) -> list[str]:
        """The 'Recommended Fix' column, in row order."""
        return [f.recommended_fix for f in self.findings]
