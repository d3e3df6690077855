"""
Models endpoints - return providers and their static models.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from config.providers import ModelInfo, ProviderInfo, get_provider_catalog


router = APIRouter()


class ModelsResponse(BaseModel):
    """Response for models endpoints."""
    modelList: list[ModelInfo]
    providers: list[ProviderInfo]
    defaultProvider: ProviderInfo


@router.get("/api/models")
async def list_models() -> ModelsResponse:
    """
    List models across all providers.

    Returns:
        ModelsResponse with every static model and provider
    """
    catalog = get_provider_catalog()
    return ModelsResponse(
        modelList=catalog.model_list(),
        providers=catalog.provider_infos(),
        defaultProvider=catalog.default_provider().to_info(),
    )


@router.get("/api/models/{provider}")
async def list_provider_models(provider: str) -> ModelsResponse:
    """List models for a single provider."""
    catalog = get_provider_catalog()
    if catalog.get(provider) is None:
        raise HTTPException(status_code=404, detail=f"Provider not found: {provider}")
    return ModelsResponse(
        modelList=catalog.model_list(provider),
        providers=catalog.provider_infos(),
        defaultProvider=catalog.default_provider().to_info(),
    )
