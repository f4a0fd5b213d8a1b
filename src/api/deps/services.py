"""Service dependencies, built once per app and per settings object."""

from __future__ import annotations

from fastapi import Depends, Request

from ..services.rate_limiter import build_rate_limiter
from ..services.transcript_service import TranscriptService
from ..services.waitlist_service import WaitlistService
from ..services.waitlist_store import build_waitlist_store
from ..settings import APISettings, get_settings


def get_transcript_service(
    request: Request, settings: APISettings = Depends(get_settings)
) -> TranscriptService:
    service = getattr(request.app.state, "transcript_service", None)
    if service is None or service.settings is not settings:
        service = TranscriptService(settings)
        request.app.state.transcript_service = service
    return service


def get_waitlist_service(
    request: Request, settings: APISettings = Depends(get_settings)
) -> WaitlistService:
    cached = getattr(request.app.state, "waitlist_service", None)
    if cached is None or cached[0] is not settings:
        service = WaitlistService(
            store=build_waitlist_store(settings),
            limiter=build_rate_limiter(
                settings.redis_url,
                settings.waitlist_rate_limit,
                settings.waitlist_rate_window_sec,
                settings.redis_prefix,
            ),
        )
        cached = (settings, service)
        request.app.state.waitlist_service = cached
    return cached[1]
