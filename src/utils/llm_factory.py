"""
LLM Factory - Provider Backend Abstraction.

Builds LlamaIndex chat LLMs for OpenAI, Google Gemini and a local Ollama
server. Temperature is fixed at construction time in LlamaIndex, so one
instance is cached per (provider, model, key, temperature).
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from llama_index.core.llms import LLM

from app.config import ModelProviderId, get_settings
from src.utils.logger import get_logger

if TYPE_CHECKING:
    from app.config import Settings

logger = get_logger(__name__)


class LLMFactoryError(Exception):
    """Raised when LLM factory encounters an error."""

    pass


def _create_openai_llm(
    settings: "Settings", model: str, api_key: str | None, temperature: float
) -> LLM:
    """Create OpenAI LLM instance."""
    try:
        from llama_index.llms.openai import OpenAI
    except ImportError as e:
        raise LLMFactoryError(
            "OpenAI LLM not installed. Run: pip install llama-index-llms-openai"
        ) from e

    key = api_key or settings.openai_api_key
    if not key:
        raise LLMFactoryError("OpenAI API key is required")

    logger.debug(f"Initializing OpenAI LLM with model: {model} (temperature={temperature})")
    return OpenAI(model=model, api_key=key, temperature=temperature)


def _create_gemini_llm(
    settings: "Settings", model: str, api_key: str | None, temperature: float
) -> LLM:
    """Create Google Gemini LLM instance."""
    try:
        from llama_index.llms.google_genai import GoogleGenAI
    except ImportError as e:
        raise LLMFactoryError(
            "Gemini LLM not installed. Run: pip install llama-index-llms-google-genai"
        ) from e

    key = api_key or settings.gemini_api_key
    if not key:
        raise LLMFactoryError("Google Gemini API key is required")

    logger.debug(f"Initializing Gemini LLM with model: {model} (temperature={temperature})")
    return GoogleGenAI(model=model, api_key=key, temperature=temperature)


def _create_ollama_llm(settings: "Settings", model: str, temperature: float) -> LLM:
    """Create Ollama LLM instance for local inference."""
    try:
        from llama_index.llms.ollama import Ollama
    except ImportError as e:
        raise LLMFactoryError(
            "Ollama LLM not installed. Run: pip install llama-index-llms-ollama"
        ) from e

    logger.debug(
        f"Initializing Ollama LLM with model: {model} at {settings.ollama_base_url}"
    )
    return Ollama(
        model=model,
        base_url=settings.ollama_base_url,
        request_timeout=settings.ollama_request_timeout,
        temperature=temperature,
    )


@lru_cache(maxsize=32)
def get_llm(
    provider: ModelProviderId | str | None = None,
    model: str | None = None,
    api_key: str | None = None,
    temperature: float = 0.3,
) -> LLM:
    """
    Get an LLM instance for a provider/model at a fixed temperature.

    Args:
        provider: Provider id (defaults to settings.llm_provider)
        model: Model name (defaults to settings.llm_model)
        api_key: Explicit API key; falls back to the configured key
        temperature: Sampling temperature

    Returns:
        LLM instance

    Raises:
        LLMFactoryError: If configuration is invalid or dependencies missing
    """
    settings = get_settings()

    try:
        backend = ModelProviderId(provider or settings.llm_provider)
    except ValueError as e:
        raise LLMFactoryError(f"Unsupported model provider: {provider}") from e

    model_name = model or settings.llm_model

    match backend:
        case ModelProviderId.OPENAI:
            return _create_openai_llm(settings, model_name, api_key, temperature)
        case ModelProviderId.GEMINI:
            return _create_gemini_llm(settings, model_name, api_key, temperature)
        case ModelProviderId.OLLAMA:
            return _create_ollama_llm(settings, model_name, temperature)
        case _:
            raise LLMFactoryError(f"Unsupported model provider: {backend}")
