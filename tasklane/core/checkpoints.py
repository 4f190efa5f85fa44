from __future__ import annotations

import json
from pathlib import Path
from typing import Any

CHECKPOINT_SUFFIX = ".json"


class CheckpointStore:
    """Reads and writes checkpointed tool calls stored as JSON files."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def ensure_dir(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def list_files(self) -> list[str]:
        return sorted(
            path.name
            for path in self.directory.iterdir()
            if path.name.endswith(CHECKPOINT_SUFFIX)
        )

    def list_names(self) -> list[str]:
        return [name[: -len(CHECKPOINT_SUFFIX)] for name in self.list_files()]

    def read(self, file_name: str) -> dict[str, Any]:
        data = json.loads((self.directory / file_name).read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Checkpoint {file_name} is not a JSON object")
        return data

    def write(self, name: str, data: dict[str, Any]) -> Path:
        self.ensure_dir()
        path = self.directory / checkpoint_file_name(name)
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        return path


def checkpoint_file_name(name: str) -> str:
    return name if name.endswith(CHECKPOINT_SUFFIX) else f"{name}{CHECKPOINT_SUFFIX}"
