# controller/catalog_controller.py
from fastapi import APIRouter, Depends, Path
from fastapi.responses import JSONResponse
from model.api import OkResponse
from service.cache_service import AGGREGATE, REFERENCE_DATA, cached_response
from service.catalog_service import CatalogService
from util.constants import InternalURIs
from controller.controller_dependencies import get_catalog_service

catalog_router = APIRouter()


@catalog_router.get(InternalURIs.CATEGORIES)
async def list_categories(
    service: CatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    return cached_response(await service.list_categories(), REFERENCE_DATA)


@catalog_router.post(InternalURIs.ASSET_VIEW, response_model=OkResponse)
async def record_view(
    assetId: str = Path(..., min_length=1, max_length=255),
    service: CatalogService = Depends(get_catalog_service),
) -> OkResponse:
    await service.record_view(assetId)
    return OkResponse(ok=True)


@catalog_router.get(InternalURIs.ASSET_STATS)
async def asset_stats(
    assetId: str = Path(..., min_length=1, max_length=255),
    service: CatalogService = Depends(get_catalog_service),
) -> JSONResponse:
    return cached_response(await service.get_stats(assetId), AGGREGATE)
