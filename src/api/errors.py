"""
Crisp exception hierarchy and the handlers that render it.

Every domain error inherits from CrispError so the app can translate it into
the ``{"error": ...}`` envelope in one place.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

LOGGER = logging.getLogger("crisp.errors")

EMPTY_RECORDING = "EMPTY_RECORDING"


class CrispError(Exception):
    """Base exception for all Crisp errors."""

    def __init__(
        self,
        detail: str = "An unexpected error occurred",
        code: str = "CRISP_ERROR",
        status_code: int = 500,
    ) -> None:
        self.detail = detail
        self.code = code
        self.status_code = status_code
        super().__init__(detail)


class NoAudioError(CrispError):
    def __init__(self) -> None:
        super().__init__(detail="No audio file provided", code="NO_AUDIO", status_code=400)


class AudioTooLargeError(CrispError):
    def __init__(self, size: int, limit: int) -> None:
        super().__init__(
            detail=f"Audio upload of {size} bytes exceeds the {limit} byte limit",
            code="AUDIO_TOO_LARGE",
            status_code=413,
        )


class TakeTooLongError(CrispError):
    def __init__(self, seconds: float, limit: float) -> None:
        super().__init__(
            detail=f"Take timeline of {seconds:g}s exceeds the {limit:g}s limit",
            code="TAKE_TOO_LONG",
            status_code=400,
        )


class EmptyRecordingError(CrispError):
    """Raised when the provider hears no speech; the client should retry the take."""

    def __init__(self) -> None:
        super().__init__(detail=EMPTY_RECORDING, code=EMPTY_RECORDING, status_code=400)


class TranscriptionError(CrispError):
    """Raised when the provider call fails (network, auth, bad response)."""

    def __init__(self, detail: str = "Failed to transcribe audio") -> None:
        super().__init__(detail=detail, code="TRANSCRIPTION_ERROR", status_code=500)


class ProviderConfigError(CrispError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="PROVIDER_CONFIG", status_code=500)


class WaitlistValidationError(CrispError):
    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, code="WAITLIST_INVALID", status_code=400)


class WaitlistStoreError(CrispError):
    def __init__(self, detail: str = "Failed to save waitlist entry") -> None:
        super().__init__(detail=detail, code="WAITLIST_STORE", status_code=500)


class RateLimitExceededError(CrispError):
    def __init__(self, limit: int, remaining: int, reset_ms: int) -> None:
        super().__init__(
            detail="Too many requests. Please try again later.",
            code="RATE_LIMITED",
            status_code=429,
        )
        self.limit = limit
        self.remaining = remaining
        self.reset_ms = reset_ms

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_ms),
        }


def first_error_message(errors: Sequence[Mapping[str, Any]]) -> str:
    """Render the first pydantic error as ``field: message``."""
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"{location}: {message}" if location else message


def register_error_handlers(app: FastAPI) -> None:
    """Attach handlers for CrispError, request validation and unexpected failures."""

    @app.exception_handler(CrispError)
    async def crisp_error_handler(request: Request, exc: CrispError) -> JSONResponse:
        headers = exc.headers if isinstance(exc, RateLimitExceededError) else None
        if request.url.path.startswith("/v1/waitlist"):
            content = {"success": False, "error": exc.detail}
        else:
            content = {"error": exc.detail}
        return JSONResponse(status_code=exc.status_code, content=content, headers=headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        detail = first_error_message(exc.errors())
        if request.url.path.startswith("/v1/waitlist"):
            return JSONResponse(status_code=400, content={"success": False, "error": detail})
        return JSONResponse(status_code=400, content={"error": detail})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
        if request.url.path.startswith("/v1/waitlist"):
            content = {"success": False, "error": "Internal server error"}
        else:
            content = {"error": "Internal server error"}
        return JSONResponse(status_code=500, content=content)
