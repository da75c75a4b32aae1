"""
Pydantic Schemas for the Merge Layer.

Diagnostic records produced by pairwise table merges.
"""

from pydantic import BaseModel, ConfigDict, Field

from src.tables.schemas import Finding

TFIDF_APPROACH = "TF-IDF cosine similarity"


class MatchDetail(BaseModel):
    """One accepted row pairing."""

    model_config = ConfigDict(frozen=True)

    row_a: Finding = Field(..., description="Kept row from the running table")
    row_b: Finding = Field(..., description="Best-scoring row from the newer pass")
    similarity: float = Field(..., description="Cosine similarity of the two fixes")


class MergeTrace(BaseModel):
    """
    Diagnostic record of one pairwise merge.

    Purely informational: later merges never read it.
    """

    model_config = ConfigDict(frozen=True)

    total_rows_a: int = Field(default=0, ge=0)
    total_rows_b: int = Field(default=0, ge=0)
    matches_found: int = Field(default=0, ge=0)
    theta: float = Field(..., ge=0.0, le=1.0)
    approach: str = Field(default=TFIDF_APPROACH)
    matches: list[MatchDetail] = Field(default_factory=list)
    final_decision: str = Field(default="")
