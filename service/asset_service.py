# service/asset_service.py
import logging
import time
from typing import Callable, Optional
from fastapi import UploadFile
from core.object_storage import InvalidStorageUrl, ObjectStorageClient
from model.asset import StorageObject
from util.enums import AssetClass, ErrorMessage
from util.errors import AppError, StorageError
from util.functions import file_extension

logger = logging.getLogger(__name__)


def derive_key(
    asset_class: AssetClass, subject_id: str, filename: Optional[str], millis: int
) -> str:
    """
    {class}_{subject}_{ms timestamp}.{ext}; the timestamp keeps keys unique
    without coordination.
    """
    return f"{asset_class.value}_{subject_id}_{millis}.{file_extension(filename)}"


def parse_asset_class(raw: Optional[str]) -> AssetClass:
    try:
        return AssetClass(raw)
    except ValueError:
        raise AppError(ErrorMessage.INVALID_ASSET_TYPE)


class AssetService:
    def __init__(
        self,
        storage: ObjectStorageClient,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._clock = clock

    async def ingest(
        self, subject_id: str, asset_type: Optional[str], file: Optional[UploadFile]
    ) -> StorageObject:
        """
        Validate, derive a key, push bytes in one write, return the public URL.
        Nothing is committed when the write fails, so there is nothing to clean up.
        """
        if file is None:
            raise AppError(ErrorMessage.MISSING_FILE)
        asset_class = parse_asset_class(asset_type)

        try:
            data = await file.read()
            await file.seek(0)
        except Exception:
            logger.error("upload.read.error subject=%s", subject_id)
            raise
        if not data:
            raise AppError(ErrorMessage.MISSING_FILE, "Uploaded file is empty")

        key = derive_key(asset_class, subject_id, file.filename, int(self._clock() * 1000))
        try:
            url = await self._storage.put(key, data)
        except StorageError as e:
            logger.error("upload.persist.error key=%s status=%s", key, e.status_code)
            raise AppError(ErrorMessage.STORAGE_FAILURE, f"Failed to upload file: {e}")

        logger.info("upload.ok key=%s bytes=%d", key, len(data))
        return StorageObject(key=key, public_url=url, size=len(data), asset_class=asset_class)

    async def delete(self, subject_id: str, url: str) -> bool:
        """
        Delete the object behind a public URL. An object that is already gone counts
        as deleted. Returns whether anything was actually removed.
        """
        try:
            key = self._storage.key_from_url(url)
        except InvalidStorageUrl as e:
            logger.warning("delete.url.invalid subject=%s err=%s", subject_id, e)
            raise AppError(ErrorMessage.INVALID_URL, str(e))

        try:
            removed = await self._storage.delete(key)
        except StorageError as e:
            logger.error("delete.storage.error key=%s status=%s", key, e.status_code)
            raise AppError(ErrorMessage.STORAGE_FAILURE, f"Failed to delete file: {e}")

        logger.info("delete.ok subject=%s key=%s removed=%s", subject_id, key, removed)
        return removed
