# model/asset.py
from dataclasses import dataclass
from util.enums import AssetClass


@dataclass(frozen=True)
class StorageObject:
    key: str
    public_url: str
    size: int
    asset_class: AssetClass
