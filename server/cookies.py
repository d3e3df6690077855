"""
Cookie parsing for client-held credentials.

The client stores API keys and provider settings as JSON in the
``apiKeys`` and ``providers`` cookies.
"""

import json
import logging
from typing import Any
from urllib.parse import unquote

from config.providers import ProviderCatalog
from core.credentials import CredentialStore

logger = logging.getLogger(__name__)

API_KEYS_COOKIE = "apiKeys"
PROVIDERS_COOKIE = "providers"


def parse_cookies(header: str | None) -> dict[str, str]:
    """Parse a Cookie header into a name -> URL-decoded value mapping."""
    if not header:
        return {}
    cookies: dict[str, str] = {}
    for item in header.split(";"):
        name, sep, value = item.strip().partition("=")
        if not sep or not name:
            continue
        cookies[name] = unquote(value)
    return cookies


def _json_object(cookies: dict[str, str], name: str) -> dict[str, Any]:
    raw = cookies.get(name)
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed %s cookie", name)
        return {}
    if not isinstance(value, dict):
        logger.warning("Ignoring %s cookie: expected a JSON object", name)
        return {}
    return value


def get_api_keys_from_cookie(header: str | None) -> dict[str, str]:
    cookies = parse_cookies(header)
    keys = _json_object(cookies, API_KEYS_COOKIE)
    return {name: value for name, value in keys.items() if isinstance(value, str)}


def get_provider_settings_from_cookie(header: str | None) -> dict[str, Any]:
    return _json_object(parse_cookies(header), PROVIDERS_COOKIE)


def credential_store_from_cookie(header: str | None, catalog: ProviderCatalog) -> CredentialStore:
    """Build the credential store for one request."""
    return CredentialStore(
        catalog,
        api_keys=get_api_keys_from_cookie(header),
        provider_settings=get_provider_settings_from_cookie(header),
    )
