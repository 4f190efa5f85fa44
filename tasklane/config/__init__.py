"""Configuration package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .manager import ConfigManager, TasklaneSettings
    from .paths import TasklanePaths

__all__ = ["ConfigManager", "TasklaneSettings", "TasklanePaths"]


def __getattr__(name: str) -> Any:
    if name in {"ConfigManager", "TasklaneSettings"}:
        from .manager import ConfigManager, TasklaneSettings

        return {"ConfigManager": ConfigManager, "TasklaneSettings": TasklaneSettings}[name]
    if name == "TasklanePaths":
        from .paths import TasklanePaths

        return TasklanePaths
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
