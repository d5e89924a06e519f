"""End-to-end tests through the FastAPI app with resources overridden."""

import pytest

from config.settings import settings
from model.db import CategoryRow

from conftest import NAMESPACE, PUBLIC_BASE, SUBJECT

AUTH = {"X-Subject-Id": SUBJECT}


class TestUploadApi:
    @pytest.mark.asyncio
    async def test_upload_then_delete_twice(self, api, object_store):
        res = await api.post(
            "/api/upload",
            headers=AUTH,
            files={"file": ("photo.png", b"png-bytes", "image/png")},
            data={"type": "avatar"},
        )
        assert res.status_code == 200
        url = res.json()["url"]
        assert url.startswith(f"{PUBLIC_BASE}/{NAMESPACE}/avatar_{SUBJECT}_")
        assert url.endswith(".png")
        assert len(object_store.objects) == 1

        for _ in range(2):
            res = await api.request("DELETE", "/api/upload", headers=AUTH, json={"url": url})
            assert res.status_code == 200
            assert res.json() == {"ok": True}
        assert object_store.objects == {}

    @pytest.mark.asyncio
    async def test_upload_without_identity_is_401(self, api, object_store):
        res = await api.post(
            "/api/upload",
            files={"file": ("photo.png", b"x", "image/png")},
            data={"type": "avatar"},
        )
        assert res.status_code == 401
        assert res.json()["error"] == "unauthorized"
        assert object_store.requests == []

    @pytest.mark.asyncio
    async def test_upload_without_file_is_400(self, api):
        res = await api.post("/api/upload", headers=AUTH, data={"type": "avatar"})
        assert res.status_code == 400
        assert res.json() == {
            "ok": False,
            "error": "missing_file",
            "message": "No file uploaded",
        }

    @pytest.mark.asyncio
    async def test_upload_with_invalid_type_is_400(self, api):
        res = await api.post(
            "/api/upload",
            headers=AUTH,
            files={"file": ("photo.png", b"x", "image/png")},
            data={"type": "poster"},
        )
        assert res.status_code == 400
        assert res.json()["error"] == "invalid_asset_type"

    @pytest.mark.asyncio
    async def test_oversized_upload_is_413(self, api, object_store, monkeypatch):
        monkeypatch.setattr(settings, "MAX_FILE_MB", 0)

        res = await api.post(
            "/api/upload",
            headers=AUTH,
            files={"file": ("photo.png", b"x", "image/png")},
            data={"type": "avatar"},
        )

        assert res.status_code == 413
        assert res.json() == {
            "ok": False,
            "error": "file_too_large",
            "message": "File exceeds 0 MB",
        }
        assert object_store.requests == []

    @pytest.mark.asyncio
    async def test_storage_outage_is_500(self, api, object_store):
        object_store.fail_with = 502
        res = await api.post(
            "/api/upload",
            headers=AUTH,
            files={"file": ("photo.png", b"x", "image/png")},
            data={"type": "banner"},
        )
        assert res.status_code == 500
        assert res.json()["error"] == "storage_failure"

    @pytest.mark.asyncio
    async def test_delete_foreign_url_is_400(self, api):
        res = await api.request(
            "DELETE",
            "/api/upload",
            headers=AUTH,
            json={"url": "https://elsewhere.test/x.png"},
        )
        assert res.status_code == 400
        assert res.json()["error"] == "invalid_url"

    @pytest.mark.asyncio
    async def test_delete_without_url_is_400(self, api):
        res = await api.request("DELETE", "/api/upload", headers=AUTH, json={})
        assert res.status_code == 400
        assert res.json()["error"] == "invalid_request"


class TestProgressApi:
    @pytest.mark.asyncio
    async def test_save_and_list(self, api):
        res = await api.post("/api/progress", headers=AUTH, json={"assetId": "a1", "percent": 42})
        assert res.status_code == 200
        body = res.json()
        assert body["subjectId"] == SUBJECT
        assert body["assetId"] == "a1"
        assert body["percent"] == 42

        res = await api.get("/api/progress", headers=AUTH)
        assert res.status_code == 200
        assert res.headers["cache-control"] == "private, max-age=300"
        assert [i["percent"] for i in res.json()["items"]] == [42]

    @pytest.mark.asyncio
    async def test_listing_reflects_latest_write(self, api):
        await api.post("/api/progress", headers=AUTH, json={"assetId": "a1", "percent": 10})
        await api.get("/api/progress", headers=AUTH)
        await api.post("/api/progress", headers=AUTH, json={"assetId": "a1", "percent": 90})

        res = await api.get("/api/progress", headers=AUTH)
        assert [i["percent"] for i in res.json()["items"]] == [90]

    @pytest.mark.parametrize(
        "payload",
        [
            {"assetId": "a1"},
            {"percent": 10},
            {"assetId": "", "percent": 10},
            {"assetId": "a1", "percent": 101},
            {"assetId": "a1", "percent": -1},
            {"assetId": "a1", "percent": "50"},
            {"assetId": "a1", "percent": 12.5},
        ],
    )
    @pytest.mark.asyncio
    async def test_malformed_payload_is_400(self, api, payload):
        res = await api.post("/api/progress", headers=AUTH, json=payload)
        assert res.status_code == 400
        assert res.json()["error"] == "invalid_request"

    @pytest.mark.asyncio
    async def test_progress_requires_identity(self, api):
        res = await api.get("/api/progress")
        assert res.status_code == 401


class TestCatalogApi:
    @pytest.mark.asyncio
    async def test_categories_are_public_and_cacheable(self, api, database):
        async with database.session() as s:
            s.add_all(
                [
                    CategoryRow(name="Music", slug="music"),
                    CategoryRow(name="Gaming", slug="gaming"),
                ]
            )
            await s.commit()

        res = await api.get("/api/categories")

        assert res.status_code == 200
        assert [c["slug"] for c in res.json()] == ["gaming", "music"]
        assert (
            res.headers["cache-control"]
            == "public, max-age=3600, stale-while-revalidate=86400"
        )

    @pytest.mark.asyncio
    async def test_view_counter(self, api):
        res = await api.get("/api/assets/a1/stats")
        assert res.json() == {"assetId": "a1", "views": 0}
        assert (
            res.headers["cache-control"]
            == "public, max-age=60, stale-while-revalidate=300"
        )

        for _ in range(3):
            res = await api.post("/api/assets/a1/view")
            assert res.status_code == 200

        res = await api.get("/api/assets/a1/stats")
        assert res.json() == {"assetId": "a1", "views": 3}

    @pytest.mark.asyncio
    async def test_healthz_reports_cache_state(self, api, fake_redis):
        res = await api.get("/healthz")
        assert res.json() == {"ok": True, "cache": "up"}

        fake_redis.down = True
        res = await api.get("/healthz")
        assert res.status_code == 200
        assert res.json() == {"ok": True, "cache": "down"}
