from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Iterable

from ..config.paths import TasklanePaths


@dataclass(frozen=True)
class HistoryItem:
    """A line of transcript shown in the terminal (info, error, user, ...)."""

    type: str
    text: str

    @classmethod
    def from_dict(cls, data: Any) -> "HistoryItem | None":
        if not isinstance(data, dict):
            return None
        item_type = data.get("type")
        text = data.get("text")
        if not isinstance(item_type, str) or not isinstance(text, str):
            return None
        return cls(type=item_type, text=text)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class ConversationHistory:
    """Client-side conversation turns, persisted to .tasklane/history.json."""

    def __init__(self, paths: TasklanePaths) -> None:
        self.paths = paths
        self._entries: list[dict[str, Any]] = self._load()

    def add_history(self, entry: dict[str, Any]) -> None:
        self._entries.append(entry)
        self._write_entries(self._entries)

    def add_text(self, role: str, text: str) -> None:
        self.add_history({"role": role, "parts": [{"text": text}]})

    async def set_history(self, entries: Iterable[dict[str, Any]]) -> None:
        self._entries = [entry for entry in entries if isinstance(entry, dict)]
        self._write_entries(self._entries)

    def get_history(self) -> list[dict[str, Any]]:
        return list(self._entries)

    def _load(self) -> list[dict[str, Any]]:
        if not self.paths.history_file.exists():
            return []
        try:
            data = json.loads(self.paths.history_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return []
        return [entry for entry in data if isinstance(entry, dict)] if isinstance(data, list) else []

    def _write_entries(self, entries: list[dict[str, Any]]) -> None:
        self.paths.tasklane_dir.mkdir(parents=True, exist_ok=True)
        self.paths.history_file.write_text(
            json.dumps(entries, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
