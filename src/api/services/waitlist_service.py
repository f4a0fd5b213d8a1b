"""Waitlist submission: throttle, validate, append."""

from __future__ import annotations

import logging
import re
from typing import Any

from pydantic import ValidationError

from ..errors import (
    RateLimitExceededError,
    WaitlistStoreError,
    WaitlistValidationError,
    first_error_message,
)
from ..metrics import WAITLIST_COUNTER
from ..schemas import WaitlistRequest
from .rate_limiter import RateLimiter
from .waitlist_store import WaitlistEntry, WaitlistStore

LOGGER = logging.getLogger("crisp.waitlist")

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_NAME = 100
MAX_CHALLENGE = 500


def validate_submission(payload: WaitlistRequest) -> WaitlistEntry:
    """Return a clean entry or raise with the first violated rule's message."""
    email = (payload.email or "").strip()
    name = (payload.name or "").strip()
    role = (payload.role or "").strip()
    challenge = (payload.challenge or "").strip()

    if not email or not EMAIL_RE.match(email):
        raise WaitlistValidationError("Invalid email")
    if not name or len(name) > MAX_NAME:
        raise WaitlistValidationError("Invalid name")
    if not role:
        raise WaitlistValidationError("Role is required")
    if not challenge or len(challenge) > MAX_CHALLENGE:
        raise WaitlistValidationError("Invalid challenge description")
    if payload.bot_field:
        raise WaitlistValidationError("Invalid submission")
    return WaitlistEntry(name=name, email=email, role=role, challenge=challenge)


def parse_submission(raw: Any) -> WaitlistRequest:
    """Coerce a decoded JSON body into a request model; bad shapes become 400s."""
    if isinstance(raw, WaitlistRequest):
        return raw
    if raw is None:
        raise WaitlistValidationError("Invalid request body")
    try:
        return WaitlistRequest.model_validate(raw)
    except ValidationError as exc:
        raise WaitlistValidationError(first_error_message(exc.errors())) from exc


class WaitlistService:
    def __init__(self, store: WaitlistStore, limiter: RateLimiter) -> None:
        self.store = store
        self.limiter = limiter

    async def submit(self, raw: Any, client_key: str) -> None:
        """Throttle, then parse and validate, then store.

        ``raw`` is the decoded JSON body (``None`` when it was not JSON) or an
        already-built ``WaitlistRequest``. Every call counts against the limit.
        """
        decision = await self.limiter.check(client_key)
        if not decision.allowed:
            WAITLIST_COUNTER.labels(status="throttled").inc()
            LOGGER.warning("Waitlist rate limit exceeded for %s", client_key)
            raise RateLimitExceededError(decision.limit, decision.remaining, decision.reset_ms)

        try:
            entry = validate_submission(parse_submission(raw))
        except WaitlistValidationError as exc:
            WAITLIST_COUNTER.labels(status="rejected").inc()
            LOGGER.info("Waitlist submission rejected: %s", exc.detail)
            raise

        try:
            await self.store.submit(entry)
        except WaitlistStoreError:
            WAITLIST_COUNTER.labels(status="error").inc()
            raise
        WAITLIST_COUNTER.labels(status="accepted").inc()
        LOGGER.info("Waitlist entry stored for role %s", entry.role)
