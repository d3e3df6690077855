"""
API key endpoints.
"""

from fastapi import APIRouter, Query, Request

from config.providers import get_provider_catalog

from ..cookies import credential_store_from_cookie


router = APIRouter()


@router.get("/api/check-env-key")
async def check_env_key(request: Request, provider: str = Query("")) -> dict:
    """Report whether a key is configured for a provider."""
    catalog = get_provider_catalog()
    if not provider or catalog.get(provider) is None:
        return {"isSet": False}
    store = credential_store_from_cookie(request.headers.get("cookie"), catalog)
    return {"isSet": store.has_key(provider)}


@router.get("/api/export-api-keys")
async def export_api_keys(request: Request) -> dict[str, str]:
    """Cookie keys merged with keys configured in the environment."""
    store = credential_store_from_cookie(request.headers.get("cookie"), get_provider_catalog())
    return store.export_keys()
