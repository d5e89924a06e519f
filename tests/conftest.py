"""Shared fixtures: in-memory SQLite, an in-test Redis double, and a fake object store."""

import os
from typing import Dict, List, Optional

os.environ.setdefault("APP_ENV", "test")

import httpx
import pytest
import pytest_asyncio
from redis.exceptions import ConnectionError as RedisConnectionError

from config.database import Database
from core.object_storage import ObjectStorageClient
from repository.distributed_cache import DistributedCache
from repository.memory_cache import MemoryCache
from service.cache_service import TieredCache
from util.functions import compile_glob

SUBJECT = "u123"
NAMESPACE = "media-test"
PUBLIC_BASE = "https://cdn.example.test"


class FakeRedis:
    """
    Just enough of redis.asyncio.Redis for the cache tier. Flip `down` to make
    every command fail with a connection error.
    """

    def __init__(self) -> None:
        self.data: Dict[str, str] = {}
        self.ttls: Dict[str, int] = {}
        self.down = False
        self.calls: List[str] = []
        self.closed = False

    def _check(self, op: str) -> None:
        self.calls.append(op)
        if self.down:
            raise RedisConnectionError("connection refused")

    async def get(self, key: str) -> Optional[str]:
        self._check("get")
        return self.data.get(key)

    async def set(self, key: str, value: str, ex: Optional[int] = None) -> bool:
        self._check("set")
        self.data[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        self._check("delete")
        removed = 0
        for k in keys:
            if self.data.pop(k, None) is not None:
                removed += 1
            self.ttls.pop(k, None)
        return removed

    async def scan_iter(self, match: str = "*", count: int = 10):
        self._check("scan")
        matcher = compile_glob(match)
        for k in list(self.data):
            if matcher.fullmatch(k):
                yield k

    async def ttl(self, key: str) -> int:
        self._check("ttl")
        if key not in self.data:
            return -2
        return self.ttls.get(key, -1)

    async def ping(self) -> bool:
        self._check("ping")
        return True

    async def aclose(self) -> None:
        self.closed = True


class FakeObjectStore:
    """httpx MockTransport handler emulating the storage zone API."""

    def __init__(self, access_key: str = "secret") -> None:
        self.access_key = access_key
        self.objects: Dict[str, bytes] = {}
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[int] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("AccessKey") != self.access_key:
            return httpx.Response(401)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="boom")
        path = request.url.raw_path.decode("ascii")
        if request.method == "PUT":
            self.objects[path] = request.content
            return httpx.Response(201)
        if request.method == "DELETE":
            if self.objects.pop(path, None) is None:
                return httpx.Response(404)
            return httpx.Response(200)
        return httpx.Response(405)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache(max_entries=64)


@pytest.fixture
def distributed(fake_redis: FakeRedis) -> DistributedCache:
    return DistributedCache(client_factory=lambda: fake_redis)


@pytest.fixture
def tiered(memory_cache: MemoryCache, distributed: DistributedCache) -> TieredCache:
    return TieredCache(memory_cache, distributed)


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def storage(object_store: FakeObjectStore) -> ObjectStorageClient:
    return ObjectStorageClient(
        hostname="storage.example.test",
        namespace=NAMESPACE,
        access_key=object_store.access_key,
        public_base_url=PUBLIC_BASE,
        timeout=5.0,
        transport=httpx.MockTransport(object_store),
    )


@pytest_asyncio.fixture
async def database():
    db = Database("sqlite+aiosqlite:///:memory:")
    await db.startup()
    yield db
    await db.shutdown()


@pytest_asyncio.fixture
async def api(database, tiered, storage):
    """httpx client bound to the app in-process, with resources overridden."""
    from main import app
    from controller.controller_dependencies import (
        get_database,
        get_object_storage,
        get_tiered_cache,
    )

    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_tiered_cache] = lambda: tiered
    app.dependency_overrides[get_object_storage] = lambda: storage
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()
