import asyncio

import httpx
import pytest

from src.api.errors import RateLimitExceededError, WaitlistStoreError, WaitlistValidationError
from src.api.schemas import WaitlistRequest
from src.api.services.rate_limiter import MemoryRateLimiter
from src.api.services.waitlist_service import WaitlistService, parse_submission, validate_submission
from src.api.services.waitlist_store import JsonlWaitlistStore, SupabaseWaitlistStore, WaitlistEntry


def _request(**overrides):
    body = {
        "name": "Grace",
        "email": "grace@example.com",
        "role": "Founder",
        "challenge": "Pitches run long.",
        "botField": "",
    }
    body.update(overrides)
    return WaitlistRequest.model_validate(body)


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"email": "grace"}, "Invalid email"),
        ({"email": "grace@example"}, "Invalid email"),
        ({"email": None}, "Invalid email"),
        ({"name": ""}, "Invalid name"),
        ({"name": "x" * 101}, "Invalid name"),
        ({"role": "  "}, "Role is required"),
        ({"challenge": ""}, "Invalid challenge description"),
        ({"challenge": "y" * 501}, "Invalid challenge description"),
        ({"botField": "filled"}, "Invalid submission"),
        ({"email": "bad", "name": ""}, "Invalid email"),
    ],
)
def test_validate_submission_rejects(overrides, message):
    with pytest.raises(WaitlistValidationError) as excinfo:
        validate_submission(_request(**overrides))
    assert excinfo.value.detail == message


def test_validate_submission_trims():
    entry = validate_submission(_request(name="  Grace  ", challenge="x" * 500))
    assert entry.name == "Grace"
    assert len(entry.challenge) == 500


@pytest.mark.parametrize(
    "raw,message",
    [
        (None, "Invalid request body"),
        (["Grace"], "valid dictionary"),
        ({"name": 123}, "name: "),
    ],
)
def test_parse_submission_rejects_bad_shapes(raw, message):
    with pytest.raises(WaitlistValidationError) as excinfo:
        parse_submission(raw)
    assert message in excinfo.value.detail


def test_service_throttles_before_parsing(tmp_path):
    store = JsonlWaitlistStore(tmp_path / "waitlist.jsonl")
    service = WaitlistService(store, MemoryRateLimiter(1, 60))

    async def go():
        with pytest.raises(WaitlistValidationError):
            await service.submit(None, "ip")
        with pytest.raises(RateLimitExceededError):
            await service.submit({"name": 123}, "ip")

    asyncio.run(go())
    assert not (tmp_path / "waitlist.jsonl").exists()


def test_service_stores_and_throttles(tmp_path):
    store = JsonlWaitlistStore(tmp_path / "waitlist.jsonl")
    service = WaitlistService(store, MemoryRateLimiter(2, 60))

    async def go():
        await service.submit(_request(), "ip")
        with pytest.raises(WaitlistValidationError):
            await service.submit(_request(email="nope"), "ip")
        with pytest.raises(RateLimitExceededError) as excinfo:
            await service.submit(_request(), "ip")
        return excinfo.value

    error = asyncio.run(go())
    assert error.headers["X-RateLimit-Remaining"] == "0"
    rows = store.read_all()
    assert len(rows) == 1
    assert rows[0]["name"] == "Grace"
    assert "created_at" in rows[0]


def test_supabase_store_posts_row():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["apikey"] = request.headers["apikey"]
        seen["body"] = request.content
        return httpx.Response(201)

    store = SupabaseWaitlistStore(
        "https://db.example.com/", "service-key", client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )
    asyncio.run(store.submit(WaitlistEntry("Grace", "grace@example.com", "Founder", "Pitches")))
    assert seen["url"] == "https://db.example.com/rest/v1/waitlist"
    assert seen["apikey"] == "service-key"
    assert b"grace@example.com" in seen["body"]


def test_supabase_store_surfaces_error_message():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(409, json={"message": "duplicate key value"})
    )
    store = SupabaseWaitlistStore("https://db.example.com", "k", client=httpx.AsyncClient(transport=transport))
    with pytest.raises(WaitlistStoreError) as excinfo:
        asyncio.run(store.submit(WaitlistEntry("a", "a@b.co", "r", "c")))
    assert excinfo.value.detail == "duplicate key value"
