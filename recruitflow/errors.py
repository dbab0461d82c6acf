"""Structured error helpers for API responses."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


def build_error_payload(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    payload = {"error": {"code": code, "message": message}}
    if details is not None:
        payload["error"]["details"] = details
    return payload


class AppError(Exception):
    """Application-scoped error for standardized API responses."""

    def __init__(self, status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.payload = build_error_payload(code, message, details)


async def app_error_handler(_: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


def raise_app_error(status_code: int, code: str, message: str, details: Optional[Dict[str, Any]] = None) -> None:
    """Raise an AppError with a standardized error shape."""
    raise AppError(status_code, code, message, details)


# --------------------------------------------------------------------
# Pipeline domain errors
# --------------------------------------------------------------------


class SchemaViolation(AppError):
    """Field key or value not recognized by the stage's field schema."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_422_UNPROCESSABLE_ENTITY, "SCHEMA_VIOLATION", message, details)


class TransitionBlocked(AppError):
    """A guard rule refused the change; message is the exact guard reason."""

    def __init__(self, reason: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_403_FORBIDDEN, "TRANSITION_BLOCKED", reason, details)
        self.reason = reason


class VersionConflict(AppError):
    """A concurrent writer committed first; the caller must re-read."""

    def __init__(self, expected_version: int, current_version: Optional[int] = None):
        details: Dict[str, Any] = {"expected_version": expected_version}
        if current_version is not None:
            details["current_version"] = current_version
        super().__init__(
            status.HTTP_409_CONFLICT,
            "VERSION_CONFLICT",
            "Record was modified by another user; reload and try again",
            details,
        )
        self.expected_version = expected_version
        self.current_version = current_version


class NotFound(AppError):
    """Unknown pipeline record, candidate, client or pending change."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_404_NOT_FOUND, "NOT_FOUND", message, details)


class Expired(AppError):
    """Pending status change was not confirmed within its window."""

    def __init__(self, message: str = "Pending status change has expired", details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_410_GONE, "EXPIRED", message, details)
