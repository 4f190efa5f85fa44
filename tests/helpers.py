from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Optional
from unittest import mock

from tasklane.agent.background import BackgroundAgentManager
from tasklane.cli.commands import CommandContext, CommandServices, CommandUI
from tasklane.config.manager import DEFAULT_PROJECT_CONFIG, TasklaneSettings
from tasklane.config.paths import TasklanePaths
from tasklane.core.history import ConversationHistory


class Workspace:
    """Temporary workspace with a command context wired to mocks for UI and git."""

    def __init__(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.paths = TasklanePaths(self.root)
        self.settings = TasklaneSettings(**DEFAULT_PROJECT_CONFIG)
        self.client = ConversationHistory(self.paths)
        self.add_item = mock.Mock()
        self.load_history = mock.Mock()

    def context(
        self,
        *,
        agents: Optional[BackgroundAgentManager] = None,
        git: object = None,
    ) -> CommandContext:
        return CommandContext(
            services=CommandServices(
                settings=self.settings,
                paths=self.paths,
                client=self.client,
                agents=agents,
                git=git,  # type: ignore[arg-type]
            ),
            ui=CommandUI(add_item=self.add_item, load_history=self.load_history),
        )

    def cleanup(self) -> None:
        self._tmp.cleanup()
