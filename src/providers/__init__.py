"""
Providers Layer - Model Invocation & Pricing.

External collaborators of the analysis engine: the chat call itself,
the provider/model catalogue and the cost calculator.
"""

from src.providers.catalog import (
    PROVIDERS,
    ModelConfig,
    ModelPricing,
    ProviderConfig,
    calculate_cost,
    format_cost,
    get_provider,
)
from src.providers.model_client import (
    ChatTurn,
    FailureKind,
    LlamaIndexModelInvoker,
    ModelInvocationError,
    ModelInvoker,
    ModelRequest,
    ModelResponse,
    OllamaStatus,
    TokenUsage,
    check_ollama_connection,
    classify_failure,
    extract_usage,
)

__all__ = [
    # Catalogue
    "PROVIDERS",
    "ProviderConfig",
    "ModelConfig",
    "ModelPricing",
    "get_provider",
    "calculate_cost",
    "format_cost",
    # Invocation
    "ModelInvoker",
    "LlamaIndexModelInvoker",
    "ModelRequest",
    "ModelResponse",
    "ChatTurn",
    "TokenUsage",
    "FailureKind",
    "ModelInvocationError",
    "classify_failure",
    "extract_usage",
    "OllamaStatus",
    "check_ollama_connection",
]
