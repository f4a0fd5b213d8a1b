"""Persistent client settings (server URL and capture format)."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from pathlib import Path


@dataclass(slots=True)
class ClientSettings:
    server_url: str = "http://127.0.0.1:8000"
    sample_rate: int = 16_000
    channels: int = 1
    last_prompt_id: str = ""


class SettingsStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._settings = self._load()

    def _load(self) -> ClientSettings:
        settings = ClientSettings()
        if not self.path.exists():
            return settings
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            raw = {}
        settings.server_url = str(raw.get("server_url", settings.server_url))
        settings.sample_rate = int(raw.get("sample_rate", settings.sample_rate))
        settings.channels = int(raw.get("channels", settings.channels))
        settings.last_prompt_id = str(raw.get("last_prompt_id", ""))
        return settings

    def get(self) -> ClientSettings:
        return self._settings

    def update(self, **kwargs) -> ClientSettings:
        for key, value in kwargs.items():
            if not hasattr(self._settings, key):
                continue
            current = getattr(self._settings, key)
            if isinstance(current, int):
                setattr(self._settings, key, int(value))
            else:
                setattr(self._settings, key, value or "")
        self._persist()
        return self._settings

    def _persist(self) -> None:
        self.path.write_text(json.dumps(asdict(self._settings)), encoding="utf-8")
