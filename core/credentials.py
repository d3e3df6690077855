"""
Provider credential lookup.

API keys and per-provider settings arrive with each request (the client
keeps them in cookies). The store answers "which key and settings apply to
provider X" with client values taking precedence over the environment.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from config.providers import ProviderCatalog


class ProviderSettings(BaseModel):
    """Client-side settings for one provider."""

    enabled: bool = True
    baseUrl: str | None = None


@dataclass
class ProviderCredentials:
    api_key: str | None = None
    settings: ProviderSettings = field(default_factory=ProviderSettings)


class CredentialStore:
    """Synchronous lookup of credentials by provider name."""

    def __init__(
        self,
        catalog: ProviderCatalog,
        api_keys: dict[str, str] | None = None,
        provider_settings: dict[str, Any] | None = None,
    ) -> None:
        self._catalog = catalog
        self._api_keys = dict(api_keys or {})
        self._settings: dict[str, ProviderSettings] = {}
        for name, raw in (provider_settings or {}).items():
            if isinstance(raw, dict):
                self._settings[name] = ProviderSettings.model_validate(raw)

    def lookup(self, provider_name: str) -> ProviderCredentials:
        """
        Get the API key and settings for a provider.

        Args:
            provider_name: Provider name as listed in the catalog

        Returns:
            ProviderCredentials; api_key is None when no key is configured
        """
        settings = self._settings.get(provider_name, ProviderSettings())
        provider = self._catalog.get(provider_name)
        if provider is None:
            return ProviderCredentials(api_key=self._api_keys.get(provider_name), settings=settings)
        return ProviderCredentials(api_key=provider.get_api_key(self._api_keys), settings=settings)

    def has_key(self, provider_name: str) -> bool:
        return bool(self.lookup(provider_name).api_key)

    def export_keys(self) -> dict[str, str]:
        """Client keys merged with keys found in the environment."""
        keys = dict(self._api_keys)
        for provider in self._catalog.list_providers():
            if keys.get(provider.name) or not provider.env_key:
                continue
            env_value = provider.get_api_key()
            if env_value:
                keys[provider.name] = env_value
        return keys
