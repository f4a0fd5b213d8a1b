"""Append-only persistence for waitlist entries."""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import httpx

from ..errors import WaitlistStoreError
from ..settings import APISettings

LOGGER = logging.getLogger("crisp.waitlist")


@dataclass(frozen=True, slots=True)
class WaitlistEntry:
    name: str
    email: str
    role: str
    challenge: str

    def to_row(self) -> Dict[str, Any]:
        return asdict(self)


class WaitlistStore(Protocol):
    name: str

    async def submit(self, entry: WaitlistEntry) -> None: ...


class JsonlWaitlistStore:
    """One JSON object per line, with the insert time added."""

    name = "jsonl"

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    async def submit(self, entry: WaitlistEntry) -> None:
        row = entry.to_row()
        row["created_at"] = time.time()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self._lock, self.path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(row, ensure_ascii=False) + "\n")
        except OSError as exc:
            LOGGER.error("Failed to append waitlist entry to %s: %s", self.path, exc)
            raise WaitlistStoreError() from exc

    def read_all(self) -> list[Dict[str, Any]]:
        if not self.path.exists():
            return []
        with self.path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]


class SupabaseWaitlistStore:
    """Insert rows through Supabase's PostgREST endpoint."""

    name = "supabase"

    def __init__(
        self,
        url: str,
        key: str,
        table: str = "waitlist",
        *,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoint = f"{url.rstrip('/')}/rest/v1/{table}"
        self.key = key
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def submit(self, entry: WaitlistEntry) -> None:
        try:
            resp = await self._client.post(
                self.endpoint,
                headers={
                    "apikey": self.key,
                    "Authorization": f"Bearer {self.key}",
                    "Prefer": "return=minimal",
                },
                json=[entry.to_row()],
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            message = _error_message(exc.response)
            LOGGER.error("Supabase insert failed (%s): %s", exc.response.status_code, message)
            raise WaitlistStoreError(message) from exc
        except httpx.HTTPError as exc:
            LOGGER.error("Supabase insert failed: %s", exc)
            raise WaitlistStoreError() from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Insert failed with status {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"Insert failed with status {response.status_code}"


def build_waitlist_store(settings: APISettings) -> WaitlistStore:
    if settings.waitlist_store == "supabase":
        if not settings.supabase_url or not settings.supabase_key:
            raise WaitlistStoreError("WAITLIST_STORE=supabase needs SUPABASE_URL and SUPABASE_KEY")
        return SupabaseWaitlistStore(
            settings.supabase_url, settings.supabase_key, settings.waitlist_table
        )
    return JsonlWaitlistStore(settings.waitlist_path)
