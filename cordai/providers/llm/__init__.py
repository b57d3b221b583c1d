from typing import Any, Dict, Type, Optional

from .base import LLMProvider, LLMMessage, LLMResponse, LLMStreamChunk, LLMProviderError
from .anthropic import AnthropicProvider
from .openai import OpenAIProvider

PROVIDER_ALIAS_MAP: Dict[str, str] = {
    "claude": "anthropic",
    "gpt": "openai",
}


def canonical_provider_name(name: str) -> str:
    """Normalize provider aliases to their canonical identifier."""

    return PROVIDER_ALIAS_MAP.get(name.lower(), name.lower())


# Registry of available LLM providers
PROVIDER_REGISTRY: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
    "openai": OpenAIProvider,
}


class LLMProviderFactory:
    """Factory for creating LLM provider instances."""

    @staticmethod
    def create_provider(
        provider_name: str,
        api_key: str,
        model: Optional[str] = None,
        **kwargs,
    ) -> LLMProvider:
        """Create an LLM provider instance."""

        provider_key = canonical_provider_name(provider_name)
        if provider_key not in PROVIDER_REGISTRY:
            available_providers = ", ".join(PROVIDER_REGISTRY.keys())
            raise ValueError(
                f"Unsupported provider '{provider_name}'. "
                f"Available providers: {available_providers}"
            )

        provider_class = PROVIDER_REGISTRY[provider_key]

        if not model:
            raise ValueError(f"No model provided for provider '{provider_key}'.")

        return provider_class(api_key=api_key, model=model, **kwargs)


def get_llm_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    settings: Optional[Any] = None,
    **kwargs,
) -> LLMProvider:
    """Instantiate an LLM provider according to configuration overrides."""

    if settings is None:
        from ...config import settings  # Local import to avoid circular dependency

    provider_input = (provider_name or "").strip().lower() or None
    model_input = (model or "").strip() or settings.llm_model.strip() or None

    resolved_provider = canonical_provider_name(provider_input or settings.llm_provider)
    if provider_input is None and model_input:
        detected_provider = settings.resolve_provider_for_model(model_input)
        if detected_provider:
            resolved_provider = canonical_provider_name(detected_provider)

    if resolved_provider == "anthropic":
        api_key = settings.anthropic_api_key
    elif resolved_provider == "openai":
        api_key = settings.openai_api_key
        kwargs.setdefault("base_url", settings.openai_base_url)
    else:
        api_key = None

    if not api_key:
        raise ValueError(f"No API key configured for provider: {resolved_provider}")

    resolved_model = model_input or settings.resolve_default_model(resolved_provider)

    return LLMProviderFactory.create_provider(
        provider_name=resolved_provider,
        api_key=api_key,
        model=resolved_model,
        **kwargs,
    )


__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMStreamChunk",
    "LLMProviderError",
    "AnthropicProvider",
    "OpenAIProvider",
    "LLMProviderFactory",
    "get_llm_provider",
    "PROVIDER_REGISTRY",
    "canonical_provider_name",
]
