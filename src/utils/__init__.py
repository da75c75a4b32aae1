"""
Utility modules for the Consistency Checker.

LLM construction per provider and Rich logging with run context.
"""

from src.utils.llm_factory import LLMFactoryError, get_llm
from src.utils.logger import LogContext, RunTagFilter, get_logger, setup_logging

__all__ = [
    "get_llm",
    "LLMFactoryError",
    "get_logger",
    "setup_logging",
    "LogContext",
    "RunTagFilter",
]
