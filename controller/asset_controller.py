# controller/asset_controller.py
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from model.api import DeleteAssetRequest, OkResponse, UploadAssetResponse
from service.asset_service import AssetService
from util.constants import InternalURIs
from controller.controller_dependencies import (
    enforce_max_upload_size,
    get_asset_service,
    get_subject_id,
    upload_rate_limit,
)

asset_router = APIRouter(dependencies=[Depends(upload_rate_limit)])


@asset_router.post(
    InternalURIs.UPLOAD,
    response_model=UploadAssetResponse,
    status_code=status.HTTP_200_OK,
    dependencies=[Depends(enforce_max_upload_size)],
)
async def upload_asset(
    subject_id: str = Depends(get_subject_id),
    file: Optional[UploadFile] = File(None),
    asset_type: Optional[str] = Form(None, alias="type"),
    service: AssetService = Depends(get_asset_service),
) -> UploadAssetResponse:
    obj = await service.ingest(subject_id, asset_type, file)
    return UploadAssetResponse(url=obj.public_url)


@asset_router.delete(InternalURIs.UPLOAD, response_model=OkResponse)
async def delete_asset(
    payload: DeleteAssetRequest,
    subject_id: str = Depends(get_subject_id),
    service: AssetService = Depends(get_asset_service),
) -> OkResponse:
    await service.delete(subject_id, payload.url)
    return OkResponse(ok=True)
