"""
Pydantic AI model construction.

Each catalog provider has a ``kind`` naming the client to use. Anthropic
and Google use their native clients; everything else speaks the OpenAI
chat completions protocol at the provider's base URL.
"""
import logging

from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModel
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.anthropic import AnthropicProvider
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider

from config.providers import ModelProvider
from core.credentials import ProviderCredentials

logger = logging.getLogger(__name__)

# OpenAI-compatible local servers ignore the key but the client requires one
LOCAL_API_KEY = "local"


def build_model(
    provider: ModelProvider, model_name: str, credentials: ProviderCredentials
) -> Model:
    """
    Create a Pydantic AI model for one request.

    Args:
        provider: Catalog entry for the provider
        model_name: Provider-specific model name
        credentials: API key and settings for the provider

    Returns:
        Model instance bound to the credentials
    """
    api_key = credentials.api_key
    if provider.kind == "anthropic":
        return AnthropicModel(model_name, provider=AnthropicProvider(api_key=api_key))
    if provider.kind == "google":
        return GoogleModel(model_name, provider=GoogleProvider(api_key=api_key))

    base_url = credentials.settings.baseUrl or provider.base_url
    if not api_key and provider.is_local():
        api_key = LOCAL_API_KEY
    logger.debug("Using OpenAI-compatible client for %s at %s", provider.name, base_url)
    return OpenAIChatModel(model_name, provider=OpenAIProvider(base_url=base_url, api_key=api_key))
