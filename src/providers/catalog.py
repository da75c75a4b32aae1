"""
Provider Catalogue & Pricing.

Which models each provider offers and what they cost per million tokens.
Cost lookups never fail: an unknown provider or model costs nothing.
"""

from pydantic import BaseModel, Field

from app.config import ModelProviderId


class ModelPricing(BaseModel):
    """USD price per million tokens."""

    input_per_million_tokens: float = Field(default=0.0, ge=0.0)
    output_per_million_tokens: float = Field(default=0.0, ge=0.0)


class ModelConfig(BaseModel):
    """One model offered by a provider."""

    name: str
    display_name: str
    pricing: ModelPricing = Field(default_factory=ModelPricing)


class ProviderConfig(BaseModel):
    """A model provider and its models."""

    id: ModelProviderId
    label: str
    requires_api_key: bool
    requires_setup: bool = False
    models: list[ModelConfig] = Field(default_factory=list)
    default_model: str

    def get_model(self, name: str) -> ModelConfig | None:
        return next((m for m in self.models if m.name == name), None)

    def has_model(self, name: str) -> bool:
        return self.get_model(name) is not None


def _model(name: str, display_name: str, input_price: float = 0.0, output_price: float = 0.0) -> ModelConfig:
    return ModelConfig(
        name=name,
        display_name=display_name,
        pricing=ModelPricing(
            input_per_million_tokens=input_price,
            output_per_million_tokens=output_price,
        ),
    )


PROVIDERS: dict[str, ProviderConfig] = {
    ModelProviderId.OPENAI.value: ProviderConfig(
        id=ModelProviderId.OPENAI,
        label="OpenAI",
        requires_api_key=True,
        models=[
            _model("gpt-4o", "GPT-4o", 2.50, 10.00),
            _model("gpt-4o-mini", "GPT-4o Mini", 0.15, 0.60),
            _model("gpt-4.1-mini", "GPT-4.1 Mini", 0.40, 1.60),
            _model("gpt-4.1-nano", "GPT-4.1 Nano", 0.10, 0.40),
            _model("gpt-3.5-turbo", "GPT-3.5 Turbo", 0.50, 1.50),
        ],
        default_model="gpt-4o-mini",
    ),
    ModelProviderId.GEMINI.value: ProviderConfig(
        id=ModelProviderId.GEMINI,
        label="Google Gemini",
        requires_api_key=True,
        models=[
            _model("gemini-2.5-flash", "Gemini 2.5 Flash", 0.35, 0.70),
            _model("gemini-2.5-pro", "Gemini 2.5 Pro", 3.50, 10.50),
        ],
        default_model="gemini-2.5-flash",
    ),
    ModelProviderId.OLLAMA.value: ProviderConfig(
        id=ModelProviderId.OLLAMA,
        label="Ollama (Local - Privacy Mode)",
        requires_api_key=False,
        requires_setup=True,
        models=[
            _model("llama3:latest", "Llama 3 (Latest)"),
            _model("llama3.1:8b", "Llama 3.1 8B"),
            _model("mistral:latest", "Mistral (Latest)"),
            _model("gemma:latest", "Gemma (Latest)"),
        ],
        default_model="llama3:latest",
    ),
}


def get_provider(provider_id: str) -> ProviderConfig | None:
    return PROVIDERS.get(str(getattr(provider_id, "value", provider_id)))


def calculate_cost(
    provider_id: str,
    model: str,
    input_tokens: int,
    output_tokens: int,
) -> float:
    """
    Cost in USD of one call.

    Args:
        provider_id: Provider identifier (e.g. 'openai')
        model: Model name
        input_tokens: Prompt tokens
        output_tokens: Completion tokens

    Returns:
        Cost in USD (0.0 for unknown providers or models)
    """
    provider = get_provider(provider_id)
    if provider is None:
        return 0.0

    config = provider.get_model(model)
    if config is None:
        return 0.0

    input_cost = input_tokens / 1_000_000 * config.pricing.input_per_million_tokens
    output_cost = output_tokens / 1_000_000 * config.pricing.output_per_million_tokens
    return input_cost + output_cost


def format_cost(cost: float) -> str:
    """Format a cost as '$0.00000'."""
    return f"${cost:.5f}"
