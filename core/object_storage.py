# core/object_storage.py
import logging
from typing import Optional
from urllib.parse import quote, unquote
import httpx
from fastapi import status
from config.settings import settings
from util.errors import StorageError
from util.timing import timed

logger = logging.getLogger(__name__)


class InvalidStorageUrl(ValueError):
    pass


class ObjectStorageClient:
    """
    Namespace-scoped blob store reached over HTTP:
      PUT    https://{hostname}/{namespace}/{key}
      DELETE https://{hostname}/{namespace}/{key}
    authenticated by a static `AccessKey` header.

    Public URLs are `{public_base}/{namespace}/{quoted key}`; `key_from_url` is the
    exact inverse and must stay in sync with `public_url`.

    With no access key configured the client runs dry: writes and deletes are
    skipped (logged) and URLs are still derived, which keeps local dev usable.
    """

    def __init__(
        self,
        *,
        hostname: str = settings.STORAGE_HOSTNAME,
        namespace: str = settings.STORAGE_NAMESPACE,
        access_key: str = settings.STORAGE_ACCESS_KEY,
        public_base_url: str = settings.storage_public_url,
        timeout: float = settings.STORAGE_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._hostname = hostname
        self._namespace = namespace.strip("/")
        self._access_key = access_key
        self._public_base = public_base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout, connect=5.0)
        self._transport = transport

    @property
    def dry_run(self) -> bool:
        return not self._access_key

    # ---------------- Key <-> URL ----------------

    def public_url(self, key: str) -> str:
        return f"{self._public_base}/{self._namespace}/{quote(key, safe='')}"

    def key_from_url(self, url: str) -> str:
        """
        Parse `url`, require the public base host, strip the leading segments that
        encode the public base path and the namespace, and return the unquoted
        remainder as the storage key.
        """
        try:
            parsed = httpx.URL(url)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise InvalidStorageUrl(f"unparseable url: {e}") from e
        if parsed.scheme not in ("http", "https") or not parsed.host:
            raise InvalidStorageUrl("url must be absolute http(s)")

        base = httpx.URL(self._public_base)
        if parsed.host.lower() != base.host.lower():
            raise InvalidStorageUrl("url is not on the public storage host")
        base_path = base.path.strip("/")
        prefix = f"{base_path}/{self._namespace}/" if base_path else f"{self._namespace}/"
        path = parsed.raw_path.decode("ascii").split("?", 1)[0].lstrip("/")
        if not path.startswith(prefix):
            raise InvalidStorageUrl("url is outside the storage namespace")
        key = unquote(path[len(prefix):])
        if not key:
            raise InvalidStorageUrl("url has no object key")
        return key

    def _object_url(self, key: str) -> str:
        return f"https://{self._hostname}/{self._namespace}/{quote(key, safe='')}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    # ---------------- Operations ----------------

    async def put(self, key: str, data: bytes) -> str:
        """
        Single synchronous write of the whole payload. Returns the public URL.
        Raises StorageError on transport failure or non-2xx.
        """
        if self.dry_run:
            logger.warning("storage.put.dry_run key=%s bytes=%d", key, len(data))
            return self.public_url(key)

        try:
            with timed(logger, "storage.put", key=key, bytes=len(data)):
                async with self._client() as client:
                    res = await client.put(
                        self._object_url(key),
                        headers={
                            "AccessKey": self._access_key,
                            "Content-Type": "application/octet-stream",
                        },
                        content=data,
                    )
        except httpx.HTTPError as e:
            logger.error("storage.put.request_error key=%s err=%s", key, type(e).__name__)
            raise StorageError(f"upload request failed: {type(e).__name__}") from e

        if res.status_code // 100 != 2:
            logger.error("storage.put.bad_status key=%s status=%d", key, res.status_code)
            raise StorageError(
                f"upload rejected with status {res.status_code}", res.status_code
            )
        return self.public_url(key)

    async def delete(self, key: str) -> bool:
        """
        Remove `key`. Returns False when the object was already absent (404), True
        when it was deleted. Any other non-2xx raises StorageError.
        """
        if self.dry_run:
            logger.warning("storage.delete.dry_run key=%s", key)
            return True

        try:
            async with self._client() as client:
                res = await client.delete(
                    self._object_url(key), headers={"AccessKey": self._access_key}
                )
        except httpx.HTTPError as e:
            logger.error("storage.delete.request_error key=%s err=%s", key, type(e).__name__)
            raise StorageError(f"delete request failed: {type(e).__name__}") from e

        if res.status_code == status.HTTP_404_NOT_FOUND:
            logger.info("storage.delete.absent key=%s", key)
            return False
        if res.status_code // 100 != 2:
            logger.error("storage.delete.bad_status key=%s status=%d", key, res.status_code)
            raise StorageError(
                f"delete rejected with status {res.status_code}", res.status_code
            )
        logger.info("storage.delete.ok key=%s", key)
        return True
