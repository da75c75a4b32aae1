"""
Model Client - The Model-Invocation Collaborator.

Sends one chat request to a provider and returns the text plus token
usage. Every failure surfaces as a ModelInvocationError carrying a
FailureKind, so callers can treat them uniformly.
"""

import asyncio
from enum import Enum
from typing import Any, Protocol, runtime_checkable

import httpx
from llama_index.core.llms import ChatMessage, ChatResponse, MessageRole
from pydantic import BaseModel, ConfigDict, Field

from app.config import ModelProviderId, get_settings
from src.providers.catalog import get_provider
from src.utils.llm_factory import LLMFactoryError, get_llm
from src.utils.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Schemas
# ============================================================================

class FailureKind(str, Enum):
    """Why a model call failed."""

    INVALID_CREDENTIALS = "invalid_credentials"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    MODEL_NOT_FOUND = "model_not_found"
    NETWORK_UNREACHABLE = "network_unreachable"
    EMPTY_RESPONSE = "empty_response"
    PROVIDER_ERROR = "provider_error"


class ModelInvocationError(Exception):
    """Raised when a model call fails."""

    def __init__(self, kind: FailureKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class ChatTurn(BaseModel):
    """One chat message."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(default="user")
    content: str


class TokenUsage(BaseModel):
    """Token counts reported by the provider."""

    input_tokens: int = Field(default=0, ge=0)
    output_tokens: int = Field(default=0, ge=0)
    total_tokens: int = Field(default=0, ge=0)


class ModelRequest(BaseModel):
    """A single chat completion request."""

    provider_id: ModelProviderId
    api_key: str | None = Field(default=None, repr=False)
    model: str
    messages: list[ChatTurn] = Field(..., min_length=1)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)


class ModelResponse(BaseModel):
    """Text output and usage of a successful call."""

    text: str
    usage: TokenUsage = Field(default_factory=TokenUsage)


@runtime_checkable
class ModelInvoker(Protocol):
    """Anything that can answer a ModelRequest."""

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        ...


# ============================================================================
# Failure classification
# ============================================================================

def _status_code(exc: BaseException) -> int | None:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return status

    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    if isinstance(status, int):
        return status

    code = getattr(exc, "code", None)
    return code if isinstance(code, int) else None


def classify_failure(exc: BaseException) -> FailureKind:
    """Map an SDK/transport exception to a FailureKind."""
    if isinstance(exc, ModelInvocationError):
        return exc.kind

    if isinstance(exc, (httpx.ConnectError, httpx.TimeoutException, ConnectionError, asyncio.TimeoutError)):
        return FailureKind.NETWORK_UNREACHABLE

    message = str(exc).lower()
    status = _status_code(exc)

    if status in (401, 403):
        return FailureKind.INVALID_CREDENTIALS
    if status == 429:
        return FailureKind.QUOTA_EXCEEDED if "quota" in message else FailureKind.RATE_LIMITED
    if status == 404:
        return FailureKind.MODEL_NOT_FOUND

    if "quota" in message:
        return FailureKind.QUOTA_EXCEEDED
    if "api key" in message or "unauthorized" in message:
        return FailureKind.INVALID_CREDENTIALS
    if "connection" in message or "connect" in message:
        return FailureKind.NETWORK_UNREACHABLE

    return FailureKind.PROVIDER_ERROR


# ============================================================================
# Usage extraction
# ============================================================================

def _lookup(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, dict):
        return source.get(key)
    return getattr(source, key, None)


def _as_int(value: Any) -> int:
    return value if isinstance(value, int) and value >= 0 else 0


def extract_usage(response: ChatResponse) -> TokenUsage:
    """
    Pull token counts out of a LlamaIndex chat response.

    OpenAI reports counts in additional_kwargs, Ollama in the raw payload
    (prompt_eval_count / eval_count), Gemini under usage_metadata.
    """
    extra = response.additional_kwargs or {}
    raw = response.raw

    input_tokens = _as_int(extra.get("prompt_tokens"))
    output_tokens = _as_int(extra.get("completion_tokens"))
    total_tokens = _as_int(extra.get("total_tokens"))

    if not (input_tokens or output_tokens):
        usage = _lookup(raw, "usage")
        metadata = _lookup(raw, "usage_metadata")
        if usage is not None:
            input_tokens = _as_int(_lookup(usage, "prompt_tokens"))
            output_tokens = _as_int(_lookup(usage, "completion_tokens"))
            total_tokens = _as_int(_lookup(usage, "total_tokens"))
        elif metadata is not None:
            input_tokens = _as_int(_lookup(metadata, "prompt_token_count"))
            output_tokens = _as_int(_lookup(metadata, "candidates_token_count"))
            total_tokens = _as_int(_lookup(metadata, "total_token_count"))
        else:
            input_tokens = _as_int(_lookup(raw, "prompt_eval_count"))
            output_tokens = _as_int(_lookup(raw, "eval_count"))

    return TokenUsage(
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=total_tokens or input_tokens + output_tokens,
    )


# ============================================================================
# LlamaIndex-backed invoker
# ============================================================================

_ROLES = {
    "system": MessageRole.SYSTEM,
    "user": MessageRole.USER,
    "assistant": MessageRole.ASSISTANT,
}


class LlamaIndexModelInvoker:
    """
    Model invoker backed by LlamaIndex chat LLMs.

    Usage:
        invoker = LlamaIndexModelInvoker()
        response = await invoker.invoke(request)
    """

    def validate(self, request: ModelRequest) -> None:
        """Check provider, model and credentials before calling out."""
        provider = get_provider(request.provider_id.value)
        if provider is None:
            raise ModelInvocationError(
                FailureKind.PROVIDER_ERROR,
                f'Provider "{request.provider_id.value}" is not supported',
            )

        if not provider.has_model(request.model):
            raise ModelInvocationError(
                FailureKind.MODEL_NOT_FOUND,
                f'Model "{request.model}" is not available for provider "{provider.id.value}"',
            )

        if provider.requires_api_key:
            key = request.api_key or get_settings().api_key_for(provider.id)
            if not key:
                raise ModelInvocationError(
                    FailureKind.INVALID_CREDENTIALS,
                    f"{provider.label} API key is required",
                )

    async def invoke(self, request: ModelRequest) -> ModelResponse:
        self.validate(request)

        try:
            llm = get_llm(
                request.provider_id,
                request.model,
                request.api_key,
                request.temperature,
            )
        except LLMFactoryError as e:
            raise ModelInvocationError(FailureKind.PROVIDER_ERROR, str(e)) from e

        messages = [
            ChatMessage(role=_ROLES.get(turn.role, MessageRole.USER), content=turn.content)
            for turn in request.messages
        ]

        try:
            response = await llm.achat(messages)
        except Exception as e:
            kind = classify_failure(e)
            logger.debug(f"{request.provider_id.value} call failed ({kind.value}): {e}")
            raise ModelInvocationError(kind, str(e)) from e

        text = (response.message.content or "").strip()
        if not text:
            raise ModelInvocationError(
                FailureKind.EMPTY_RESPONSE,
                f"{request.provider_id.value} returned an empty response",
            )

        return ModelResponse(text=text, usage=extract_usage(response))


# ============================================================================
# Ollama probe
# ============================================================================

class OllamaStatus(BaseModel):
    """Result of probing a local Ollama server."""

    connected: bool
    models: list[str] = Field(default_factory=list)
    error: str | None = None


async def check_ollama_connection(base_url: str | None = None, timeout: float = 2.0) -> OllamaStatus:
    """List the models of a local Ollama server, if it is reachable."""
    url = (base_url or get_settings().ollama_base_url).rstrip("/") + "/api/tags"

    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url)
    except httpx.HTTPError:
        return OllamaStatus(
            connected=False,
            error="Cannot connect to Ollama. Please ensure it is installed and running.",
        )

    if response.status_code != 200:
        return OllamaStatus(connected=False, error="Ollama server responded with an error.")

    try:
        payload = response.json()
        names = [m.get("name", "") for m in payload.get("models", []) if m.get("name")]
    except (ValueError, AttributeError):
        return OllamaStatus(connected=False, error="Ollama server returned an unreadable model list.")

    return OllamaStatus(connected=True, models=names)
