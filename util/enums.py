# util/enums.py
from enum import Enum
from typing import NamedTuple
from fastapi import status


class Color(str, Enum):
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"

    def __str__(self):
        return self.value


class Environment(str, Enum):
    DEV = "dev"
    PROD = "prod"


class AssetClass(str, Enum):
    AVATAR = "avatar"
    BANNER = "banner"


class ErrorInfo(NamedTuple):
    code: str
    message: str
    http_status: int


class ErrorMessage(Enum):
    UNAUTHORIZED = ErrorInfo(
        "unauthorized", "Authentication required", status.HTTP_401_UNAUTHORIZED
    )
    MISSING_FILE = ErrorInfo(
        "missing_file", "No file uploaded", status.HTTP_400_BAD_REQUEST
    )
    INVALID_ASSET_TYPE = ErrorInfo(
        "invalid_asset_type",
        "Asset type must be one of: avatar, banner",
        status.HTTP_400_BAD_REQUEST,
    )
    INVALID_URL = ErrorInfo(
        "invalid_url", "URL is not a storage URL", status.HTTP_400_BAD_REQUEST
    )
    INVALID_REQUEST = ErrorInfo(
        "invalid_request", "Malformed request", status.HTTP_400_BAD_REQUEST
    )
    FILE_TOO_LARGE = ErrorInfo(
        "file_too_large",
        "File exceeds the upload size limit",
        413,
    )
    STORAGE_FAILURE = ErrorInfo(
        "storage_failure",
        "Object storage request failed, retry later",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
