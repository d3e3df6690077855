"""Model provider configuration and the process-wide provider catalog."""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel

from .defaults import DEFAULT_MODEL_PROVIDERS, DEFAULT_PROVIDER

logger = logging.getLogger(__name__)

PROVIDER_KINDS = ("anthropic", "google", "openai")


class ModelInfo(BaseModel):
    name: str
    label: str
    provider: str
    maxTokenAllowed: int
    maxCompletionTokens: int | None = None


class ProviderInfo(BaseModel):
    name: str
    staticModels: list[ModelInfo]
    getApiKeyLink: str | None = None
    labelForGetApiKey: str | None = None
    icon: str | None = None


@dataclass
class ModelProvider:
    """Represents a model provider configuration.

    Attributes:
        name: Unique provider name, as sent in model directives and cookies
        kind: Client implementation (anthropic, google or openai-compatible)
        base_url: Base URL for API requests
        env_key: Environment variable name for API key (None for local providers)
        api_key_link: Where users obtain a key
        static_models: Models known without querying the provider
    """

    name: str
    kind: str
    base_url: str
    env_key: Optional[str] = None
    api_key_link: Optional[str] = None
    static_models: list[ModelInfo] = field(default_factory=list)

    def get_api_key(self, api_keys: Optional[dict[str, str]] = None) -> Optional[str]:
        """Get API key, preferring a client-supplied key over the environment.

        Args:
            api_keys: Client-side keys by provider name

        Returns:
            API key string if one is configured, None otherwise
        """
        if api_keys and api_keys.get(self.name):
            return api_keys[self.name]
        if self.env_key:
            return os.environ.get(self.env_key)
        return None

    def is_local(self) -> bool:
        """Check if provider is local (no API key needed)."""
        return self.env_key is None

    def to_info(self) -> ProviderInfo:
        return ProviderInfo(
            name=self.name,
            staticModels=self.static_models,
            getApiKeyLink=self.api_key_link,
            labelForGetApiKey="Get API Key" if self.api_key_link else None,
        )


def _build_provider(name: str, config: dict[str, Any]) -> ModelProvider:
    config = dict(config)
    kind = config.pop("kind", "openai")
    if kind not in PROVIDER_KINDS:
        raise ValueError(f"Unknown provider kind for {name}: {kind}")
    models = [
        ModelInfo(provider=name, **model) for model in config.pop("static_models", [])
    ]
    return ModelProvider(name=name, kind=kind, static_models=models, **config)


class ProviderCatalog:
    """Registry of model providers and their static models.

    Populated once per process and never invalidated. Accessors initialize
    lazily, so the catalog is usable without an explicit ``initialize``.
    """

    def __init__(self) -> None:
        self._providers: dict[str, ModelProvider] = {}
        self._default_provider_name = DEFAULT_PROVIDER
        self._initialized = False
        self._provider_infos: Optional[list[ProviderInfo]] = None

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(
        self,
        extra_providers: Optional[dict[str, dict[str, Any]]] = None,
        default_provider: Optional[str] = None,
    ) -> None:
        """Load the default providers plus any configured extras.

        Calling this more than once has no effect.

        Args:
            extra_providers: Provider configs by name, overriding defaults
            default_provider: Name of the provider used when none is requested
        """
        if self._initialized:
            return

        for name, config in DEFAULT_MODEL_PROVIDERS.items():
            self._providers[name] = _build_provider(name, config)
        for name, config in (extra_providers or {}).items():
            self._providers[name] = _build_provider(name, config)

        if default_provider and default_provider in self._providers:
            self._default_provider_name = default_provider
        elif default_provider:
            logger.warning("Default provider %s not configured, using %s", default_provider, DEFAULT_PROVIDER)

        self._initialized = True
        logger.info("Provider catalog initialized with %d providers", len(self._providers))

    def get(self, name: str) -> Optional[ModelProvider]:
        """Get provider by name."""
        self.initialize()
        return self._providers.get(name)

    def list_providers(self) -> list[ModelProvider]:
        """List all available providers."""
        self.initialize()
        return list(self._providers.values())

    def default_provider(self) -> ModelProvider:
        self.initialize()
        return self._providers[self._default_provider_name]

    def provider_infos(self) -> list[ProviderInfo]:
        """Client-facing provider descriptions, built once per catalog."""
        if self._provider_infos is None:
            self._provider_infos = [provider.to_info() for provider in self.list_providers()]
        return self._provider_infos

    def model_list(self, provider_name: Optional[str] = None) -> list[ModelInfo]:
        """List static models, optionally for a single provider."""
        if provider_name is not None:
            provider = self.get(provider_name)
            return list(provider.static_models) if provider else []
        return [model for provider in self.list_providers() for model in provider.static_models]

    def resolve_model(self, provider_name: str, model_name: str) -> tuple[ModelProvider, ModelInfo]:
        """Find the provider and model to use for a request.

        Unknown providers fall back to the default provider; unknown models
        fall back to the provider's first static model.

        Args:
            provider_name: Requested provider name
            model_name: Requested model name

        Returns:
            Tuple of (provider, model info)

        Raises:
            ValueError: If the resolved provider has no models at all
        """
        provider = self.get(provider_name)
        if provider is None:
            logger.warning("Unknown provider %s, falling back to %s", provider_name, self._default_provider_name)
            provider = self.default_provider()

        for model in provider.static_models:
            if model.name == model_name:
                return provider, model

        if not provider.static_models:
            raise ValueError(f"No models available for provider: {provider.name}")

        fallback = provider.static_models[0]
        logger.warning(
            "Model %s not found for provider %s, falling back to %s",
            model_name,
            provider.name,
            fallback.name,
        )
        return provider, fallback


# Process-wide catalog instance
_catalog: ProviderCatalog | None = None


def get_provider_catalog() -> ProviderCatalog:
    """Get the process-wide provider catalog, creating it if necessary."""
    global _catalog
    if _catalog is None:
        _catalog = ProviderCatalog()
    return _catalog


def set_provider_catalog(catalog: ProviderCatalog) -> None:
    """Install a specific catalog instance (used at startup and in tests)."""
    global _catalog
    _catalog = catalog


def reset_provider_catalog() -> None:
    """Drop the process-wide catalog so the next access rebuilds it."""
    global _catalog
    _catalog = None
