# controller/controller_dependencies.py
import logging
from typing import Optional
from fastapi import Depends, File, Request, Response, UploadFile
from fastapi_limiter import FastAPILimiter
from fastapi_limiter.depends import RateLimiter
from redis.exceptions import RedisError
from config.database import Database
from config.settings import settings
from core.object_storage import ObjectStorageClient
from repository.catalog_repository import AssetStatsRepository, CategoryRepository
from repository.progress_repository import ProgressRepository
from service.asset_service import AssetService
from service.cache_service import TieredCache
from service.catalog_service import CatalogService
from service.progress_service import ProgressService
from util.enums import ErrorMessage
from util.errors import AppError

logger = logging.getLogger(__name__)


# ---------------- Identity ----------------

def get_subject_id(request: Request) -> str:
    """
    The auth gateway in front of us forwards the authenticated subject in a
    trusted header. Missing identity is rejected, never dropped.
    """
    subject = (request.headers.get(settings.SUBJECT_HEADER) or "").strip()
    if not subject:
        raise AppError(ErrorMessage.UNAUTHORIZED)
    return subject


# ---------------- Process-wide resources (created in lifespan) ----------------

def get_tiered_cache(request: Request) -> TieredCache:
    return request.app.state.cache


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_object_storage(request: Request) -> ObjectStorageClient:
    return request.app.state.storage


# ---------------- Services ----------------

def get_progress_service(
    db: Database = Depends(get_database),
    cache: TieredCache = Depends(get_tiered_cache),
) -> ProgressService:
    return ProgressService(ProgressRepository(db), cache)


def get_catalog_service(
    db: Database = Depends(get_database),
    cache: TieredCache = Depends(get_tiered_cache),
) -> CatalogService:
    return CatalogService(CategoryRepository(db), AssetStatsRepository(db), cache)


def get_asset_service(
    storage: ObjectStorageClient = Depends(get_object_storage),
) -> AssetService:
    return AssetService(storage)


# ---------------- Upload guards ----------------

_upload_limiter = RateLimiter(
    times=settings.RATE_LIMIT_TIMES, seconds=settings.RATE_LIMIT_SECONDS
)


async def upload_rate_limit(request: Request, response: Response) -> None:
    # Fails open: no Redis means no rate limiting, not a failed upload
    if FastAPILimiter.redis is None:
        return
    try:
        await _upload_limiter(request, response)
    except (RedisError, OSError) as e:
        logger.warning("ratelimit.unavailable err=%s", type(e).__name__)


async def enforce_max_upload_size(
    request: Request, file: Optional[UploadFile] = File(None)
) -> Optional[UploadFile]:
    if file is None:
        return None

    max_bytes = settings.MAX_FILE_MB * 1024 * 1024
    too_large = AppError(
        ErrorMessage.FILE_TOO_LARGE, f"File exceeds {settings.MAX_FILE_MB} MB"
    )

    # Fast pre-check via Content-Length if present
    cl = request.headers.get("content-length")
    if cl and cl.isdigit() and int(cl) > max_bytes:
        raise too_large

    # Hard cap while reading (works even without Content-Length)
    blob = await file.read(max_bytes + 1)
    if len(blob) > max_bytes:
        raise too_large

    await file.seek(0)
    return file
