# model/api.py
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field


class UploadAssetResponse(BaseModel):
    url: str


class DeleteAssetRequest(BaseModel):
    url: str = Field(min_length=1)


class OkResponse(BaseModel):
    ok: bool = True


class ProgressRequest(BaseModel):
    assetId: str = Field(min_length=1, max_length=255)
    percent: int = Field(ge=0, le=100, strict=True)


class ProgressRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    subjectId: str
    assetId: str
    percent: int
    updatedAt: datetime


class AssetStats(BaseModel):
    assetId: str
    views: int


class Category(BaseModel):
    id: int
    name: str
    slug: str
