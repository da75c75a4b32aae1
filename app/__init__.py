"""
Multi-Pass Consistency Checker - Application Layer.

Settings shared by the FastAPI service (app.main) and the CLI scripts.
"""

from app.config import (
    AnalysisEmphasis,
    ModelProviderId,
    PassStrategy,
    Settings,
    get_settings,
)

__all__ = [
    "get_settings",
    "Settings",
    "ModelProviderId",
    "PassStrategy",
    "AnalysisEmphasis",
]
