from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from rich.console import Console

from .paths import TasklanePaths


DEFAULT_PROJECT_CONFIG: Dict[str, Any] = {
    "checkpointing": True,
    "background_agent": True,
    "select_window_size": 10,
    "show_scroll_arrows": True,
    "debug": False,
}


@dataclass
class TasklaneSettings:
    checkpointing: bool
    background_agent: bool
    select_window_size: int
    show_scroll_arrows: bool
    debug: Any


class ConfigManager:
    """Handles Tasklane workspace and global configuration files."""

    def __init__(self, paths: TasklanePaths, console: Optional[Console] = None) -> None:
        self.paths = paths
        self.console = console or Console()

    def set_debug(self, value: Any) -> None:
        """Persist the workspace debug logging selection."""
        self.paths.tasklane_dir.mkdir(parents=True, exist_ok=True)
        data = self._read_json(self.paths.config_file)
        if not data:
            data = self._default_project_config()
        data["debug"] = value
        self._write_project_config(data)

    def load_project_config(self) -> Dict[str, Any]:
        """Read the workspace config merged over global defaults."""
        merged = self._merge_dicts(
            self._default_project_config(), self._read_json(self.paths.global_config_file)
        )
        merged = self._merge_dicts(merged, self._read_json(self.paths.config_file))
        return self._normalize_project_config(merged)

    def load_settings(self) -> TasklaneSettings:
        cfg = self.load_project_config()
        return TasklaneSettings(
            checkpointing=cfg["checkpointing"],
            background_agent=cfg["background_agent"],
            select_window_size=cfg["select_window_size"],
            show_scroll_arrows=cfg["show_scroll_arrows"],
            debug=cfg["debug"],
        )

    def _default_project_config(self) -> Dict[str, Any]:
        return dict(DEFAULT_PROJECT_CONFIG)

    def _normalize_project_config(self, data: Dict[str, Any]) -> Dict[str, Any]:
        normalized = dict(data)
        for key in ("checkpointing", "background_agent", "show_scroll_arrows"):
            normalized[key] = self._to_bool(normalized.get(key), DEFAULT_PROJECT_CONFIG[key])
        window = self._to_int(normalized.get("select_window_size"))
        if window is None or window < 1:
            window = DEFAULT_PROJECT_CONFIG["select_window_size"]
        normalized["select_window_size"] = window
        return normalized

    def _merge_dicts(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        if not override:
            return dict(base)
        merged: Dict[str, Any] = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._merge_dicts(merged[key], value)  # type: ignore[arg-type]
            else:
                merged[key] = value
        return merged

    def _read_json(self, path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            self.console.print(
                f"[red]Failed to parse JSON config at {path}. Using defaults.[/red]"
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _write_project_config(self, data: Dict[str, Any]) -> None:
        self.paths.config_file.write_text(
            json.dumps(data, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

    def _to_bool(self, value: Any, default: bool) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            cleaned = value.strip().lower()
            if cleaned in {"1", "true", "yes", "y", "on"}:
                return True
            if cleaned in {"0", "false", "no", "n", "off"}:
                return False
        if isinstance(value, int):
            return bool(value)
        return default

    def _to_int(self, value: Any) -> Optional[int]:
        if isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
