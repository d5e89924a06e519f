# util/errors.py
from typing import Optional
from fastapi import HTTPException
from util.enums import ErrorMessage


class AppError(HTTPException):
    # Flow: raise AppError to short-circuit with a typed status & stable error code.
    def __init__(self, error: ErrorMessage, message: Optional[str] = None) -> None:
        info = error.value
        self.code = info.code
        super().__init__(
            status_code=info.http_status,
            detail={"ok": False, "error": info.code, "message": message or info.message},
        )


class StorageError(Exception):
    """Object storage answered with a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
