"""Tests for asset ingestion and deletion."""

import io

import pytest
from fastapi import UploadFile

from service.asset_service import AssetService, derive_key, parse_asset_class
from util.enums import AssetClass
from util.errors import AppError

from conftest import NAMESPACE, PUBLIC_BASE, SUBJECT


def upload(data: bytes, filename="photo.png") -> UploadFile:
    return UploadFile(file=io.BytesIO(data), filename=filename)


@pytest.fixture
def service(storage):
    return AssetService(storage, clock=lambda: 1700000000.0)


class TestDeriveKey:
    def test_uses_class_subject_millis_and_extension(self):
        key = derive_key(AssetClass.AVATAR, "u123", "photo.png", 1700000000000)
        assert key == "avatar_u123_1700000000000.png"

    @pytest.mark.parametrize("filename", [None, "", "noext", "weird.p/g", "trailing."])
    def test_missing_or_odd_extension_falls_back_to_jpg(self, filename):
        assert derive_key(AssetClass.BANNER, "u1", filename, 7) == "banner_u1_7.jpg"

    def test_parse_asset_class_rejects_unknown(self):
        assert parse_asset_class("banner") is AssetClass.BANNER
        with pytest.raises(AppError) as e:
            parse_asset_class("poster")
        assert e.value.status_code == 400
        assert e.value.code == "invalid_asset_type"


class TestIngest:
    @pytest.mark.asyncio
    async def test_upload_returns_public_url_for_derived_key(self, service, object_store):
        obj = await service.ingest(SUBJECT, "avatar", upload(b"png-bytes"))

        assert obj.key == "avatar_u123_1700000000000.png"
        assert obj.public_url == f"{PUBLIC_BASE}/{NAMESPACE}/avatar_u123_1700000000000.png"
        assert obj.size == len(b"png-bytes")
        assert obj.asset_class is AssetClass.AVATAR
        assert object_store.objects[f"/{NAMESPACE}/{obj.key}"] == b"png-bytes"

    @pytest.mark.asyncio
    async def test_missing_file(self, service):
        with pytest.raises(AppError) as e:
            await service.ingest(SUBJECT, "avatar", None)
        assert e.value.code == "missing_file"

    @pytest.mark.asyncio
    async def test_empty_file_is_rejected(self, service, object_store):
        with pytest.raises(AppError) as e:
            await service.ingest(SUBJECT, "avatar", upload(b""))
        assert e.value.code == "missing_file"
        assert object_store.requests == []

    @pytest.mark.asyncio
    async def test_invalid_type_does_not_touch_storage(self, service, object_store):
        with pytest.raises(AppError) as e:
            await service.ingest(SUBJECT, "poster", upload(b"x"))
        assert e.value.code == "invalid_asset_type"
        assert object_store.requests == []

    @pytest.mark.asyncio
    async def test_storage_failure_maps_to_500(self, service, object_store):
        object_store.fail_with = 503
        with pytest.raises(AppError) as e:
            await service.ingest(SUBJECT, "banner", upload(b"x"))
        assert e.value.status_code == 500
        assert e.value.code == "storage_failure"


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_twice_succeeds(self, service, object_store):
        obj = await service.ingest(SUBJECT, "avatar", upload(b"x"))

        assert await service.delete(SUBJECT, obj.public_url) is True
        assert await service.delete(SUBJECT, obj.public_url) is False
        assert object_store.objects == {}

    @pytest.mark.asyncio
    async def test_url_outside_namespace_is_invalid(self, service, object_store):
        with pytest.raises(AppError) as e:
            await service.delete(SUBJECT, "https://elsewhere.test/bucket/a.png")
        assert e.value.status_code == 400
        assert e.value.code == "invalid_url"
        assert object_store.requests == []

    @pytest.mark.asyncio
    async def test_storage_failure_on_delete(self, service, object_store):
        object_store.fail_with = 500
        with pytest.raises(AppError) as e:
            await service.delete(SUBJECT, f"{PUBLIC_BASE}/{NAMESPACE}/a.png")
        assert e.value.code == "storage_failure"
