# client/media_client.py
import logging
from typing import Optional
import httpx
from client.frame_sampler import PreviewFrame, data_url_to_bytes
from config.settings import settings
from util.constants import InternalURIs
from util.enums import AssetClass

logger = logging.getLogger(__name__)


class MediaClientError(Exception):
    """
    An upload or delete call failed. Carries enough to decide whether to retry.
    """

    def __init__(
        self, message: str, status_code: Optional[int] = None, code: Optional[str] = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code

    @property
    def retryable(self) -> bool:
        if self.status_code is None:
            return True
        return self.status_code >= 500 or self.status_code == 429


class MediaApiClient:
    """
    Async client for the upload, delete and progress endpoints.

    Pass a ready `httpx.AsyncClient` (tests use one with a MockTransport) or let
    the client own one built from `base_url`.
    """

    def __init__(
        self,
        subject_id: str,
        base_url: str = "http://127.0.0.1:8000",
        *,
        http: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self._headers = {settings.SUBJECT_HEADER: subject_id}

    async def __aenter__(self) -> "MediaApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    @staticmethod
    def _raise_for(res: httpx.Response, action: str) -> None:
        if res.status_code // 100 == 2:
            return
        code = None
        try:
            body = res.json()
            code = body.get("error") if isinstance(body, dict) else None
        except ValueError:
            pass
        raise MediaClientError(
            f"{action} failed with status {res.status_code}", res.status_code, code
        )

    async def upload_asset(
        self,
        data: bytes,
        filename: str,
        asset_type: AssetClass,
        content_type: str = "application/octet-stream",
    ) -> str:
        try:
            res = await self._http.post(
                InternalURIs.UPLOAD,
                headers=self._headers,
                files={"file": (filename, data, content_type)},
                data={"type": asset_type.value},
            )
        except httpx.HTTPError as e:
            raise MediaClientError(f"upload request failed: {type(e).__name__}") from e
        self._raise_for(res, "upload")
        return res.json()["url"]

    async def upload_frame(
        self, frame: PreviewFrame, asset_type: AssetClass, filename: str = "thumbnail.jpg"
    ) -> str:
        data, mime = data_url_to_bytes(frame.data_url)
        return await self.upload_asset(data, filename, asset_type, mime)

    async def delete_asset(self, url: str) -> None:
        try:
            res = await self._http.request(
                "DELETE", InternalURIs.UPLOAD, headers=self._headers, json={"url": url}
            )
        except httpx.HTTPError as e:
            raise MediaClientError(f"delete request failed: {type(e).__name__}") from e
        self._raise_for(res, "delete")

    async def report_progress(self, asset_id: str, percent: int) -> None:
        """
        Persistence callable for ProgressDebouncer. Raises on failure; the debouncer
        logs and drops it.
        """
        res = await self._http.post(
            InternalURIs.PROGRESS,
            headers=self._headers,
            json={"assetId": asset_id, "percent": percent},
        )
        res.raise_for_status()
