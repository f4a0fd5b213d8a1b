"""HTTP client for the Crisp API."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from ..store.settings_store import SettingsStore

EMPTY_RECORDING = "EMPTY_RECORDING"


class ApiError(Exception):
    pass


class EmptyRecordingError(ApiError):
    """The server heard no speech in the take."""


class ApiClient:
    def __init__(
        self,
        settings: SettingsStore,
        *,
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.settings_store = settings
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)

    def _url(self, path: str) -> str:
        base = self.settings_store.get().server_url.rstrip("/")
        if not base:
            raise ApiError("Server URL missing")
        return f"{base}{path}"

    async def test_connection(self) -> bool:
        try:
            resp = await self._client.get(self._url("/healthz"))
        except httpx.HTTPError as exc:
            raise ApiError(str(exc)) from exc
        return resp.status_code == 200

    async def transcribe(self, audio: bytes, mime_type: str = "audio/wav") -> Dict[str, Any]:
        extension = mime_type.split("/")[-1].split(";")[0] or "wav"
        files = {"audio": (f"take.{extension}", audio, mime_type)}
        try:
            resp = await self._client.post(self._url("/v1/transcribe"), files=files)
        except httpx.HTTPError as exc:
            raise ApiError(f"Upload failed: {exc}") from exc
        body = self._json(resp)
        if resp.status_code == 400 and body.get("error") == EMPTY_RECORDING:
            raise EmptyRecordingError("No speech detected")
        if resp.is_error:
            raise ApiError(body.get("error") or f"Transcription failed: {resp.status_code}")
        return body

    async def analyze(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._post_json("/v1/analysis", payload)

    async def random_prompt(
        self, category: Optional[str] = None, exclude: Optional[str] = None
    ) -> Dict[str, Any]:
        params = {k: v for k, v in {"category": category, "exclude": exclude}.items() if v}
        try:
            resp = await self._client.get(self._url("/v1/prompts/random"), params=params)
        except httpx.HTTPError as exc:
            raise ApiError(str(exc)) from exc
        body = self._json(resp)
        if resp.is_error:
            raise ApiError(body.get("error") or f"Prompt error: {resp.status_code}")
        return body

    async def join_waitlist(
        self, name: str, email: str, role: str, challenge: str
    ) -> Dict[str, Any]:
        payload = {"name": name, "email": email, "role": role, "challenge": challenge, "botField": ""}
        return await self._post_json("/v1/waitlist", payload)

    async def _post_json(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = await self._client.post(self._url(path), json=payload)
        except httpx.HTTPError as exc:
            raise ApiError(str(exc)) from exc
        body = self._json(resp)
        if resp.is_error:
            raise ApiError(body.get("error") or f"Request failed: {resp.status_code}")
        return body

    @staticmethod
    def _json(resp: httpx.Response) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError as exc:
            if resp.is_error:
                return {}
            raise ApiError(f"Invalid response: {exc}") from exc
        return body if isinstance(body, dict) else {}

    async def aclose(self) -> None:
        await self._client.aclose()
