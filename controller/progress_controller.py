# controller/progress_controller.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from model.api import ProgressRecord, ProgressRequest
from service.cache_service import SUBJECT_PRIVATE, cached_response
from service.progress_service import ProgressService
from util.constants import InternalURIs
from controller.controller_dependencies import get_progress_service, get_subject_id

progress_router = APIRouter()


@progress_router.post(InternalURIs.PROGRESS, response_model=ProgressRecord)
async def save_progress(
    payload: ProgressRequest,
    subject_id: str = Depends(get_subject_id),
    service: ProgressService = Depends(get_progress_service),
) -> ProgressRecord:
    return await service.upsert(subject_id, payload.assetId, payload.percent)


@progress_router.get(InternalURIs.PROGRESS)
async def list_progress(
    subject_id: str = Depends(get_subject_id),
    service: ProgressService = Depends(get_progress_service),
) -> JSONResponse:
    items = await service.list_for_subject(subject_id)
    return cached_response({"items": items}, SUBJECT_PRIVATE)
