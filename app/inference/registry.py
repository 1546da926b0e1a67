"""Inference provider selection."""

from app.core.config import InferenceProviderEnum, Settings

from .base import InferenceProvider
from .gemini_provider import GeminiProvider
from .openai_provider import OpenAIProvider

PROVIDERS: dict[InferenceProviderEnum, type[InferenceProvider]] = {
    InferenceProviderEnum.openai: OpenAIProvider,
    InferenceProviderEnum.gemini: GeminiProvider,
}


def create_inference_provider(config: Settings) -> InferenceProvider:
    """Build the configured provider.

    Raises InferenceConfigurationError when the provider's API key is missing.
    """
    provider_cls = PROVIDERS[config.inference_provider]
    return provider_cls(config)
