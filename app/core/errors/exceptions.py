from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class AppError(Exception):
    code: str
    message: str
    http_status: int = 400
    detail: Any | None = None
    cause: Exception | None = None

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error": self.message,
            "code": self.code,
        }
        if self.detail is not None:
            payload["detail"] = self.detail
        return payload


class InvalidInputError(AppError):
    def __init__(self, message: str = "Invalid input", *, detail: Any | None = None):
        super().__init__(code="INVALID_INPUT", message=message, http_status=400, detail=detail)


class UnauthenticatedError(AppError):
    def __init__(self, message: str = "Authentication required", *, cause: Exception | None = None):
        super().__init__(code="UNAUTHENTICATED", message=message, http_status=401, cause=cause)


class ConfigurationError(AppError):
    def __init__(self, message: str = "API configuration error", *, detail: Any | None = None):
        super().__init__(code="CONFIGURATION_ERROR", message=message, http_status=500, detail=detail)


class StorageError(AppError):
    def __init__(self, message: str = "Failed to upload image to storage", *, cause: Exception | None = None):
        super().__init__(code="STORAGE_ERROR", message=message, http_status=500, cause=cause)


class UpstreamError(AppError):
    def __init__(self, message: str = "Failed to generate image", *, http_status: int = 502, detail: Any | None = None):
        super().__init__(code="UPSTREAM_ERROR", message=message, http_status=http_status, detail=detail)
