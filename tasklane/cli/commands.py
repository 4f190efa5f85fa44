from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Union

from ..agent.background import BackgroundAgentManager
from ..config.manager import TasklaneSettings
from ..config.paths import TasklanePaths
from ..core.git_snapshot import GitSnapshotService
from ..core.history import ConversationHistory, HistoryItem


class CommandError(Exception):
    """Raised by a command action; shown to the user as an error panel."""


@dataclass(frozen=True)
class MessageAction:
    message_type: Literal["info", "error"]
    content: str
    type: Literal["message"] = "message"


@dataclass(frozen=True)
class ToolAction:
    tool_name: str
    tool_args: Dict[str, Any]
    type: Literal["tool"] = "tool"


@dataclass(frozen=True)
class QuitAction:
    type: Literal["quit"] = "quit"


CommandResult = Union[MessageAction, ToolAction, QuitAction, None]


@dataclass
class CommandServices:
    settings: TasklaneSettings
    paths: TasklanePaths
    client: ConversationHistory
    agents: Optional[BackgroundAgentManager] = None
    git: Optional[GitSnapshotService] = None


@dataclass
class CommandUI:
    add_item: Callable[[HistoryItem, float], None]
    load_history: Callable[[List[HistoryItem]], None]


@dataclass
class CommandContext:
    services: CommandServices
    ui: CommandUI


CommandAction = Callable[[CommandContext, str], Awaitable[CommandResult]]
CommandCompletion = Callable[[CommandContext, str], Awaitable[List[str]]]


@dataclass
class SlashCommand:
    name: str
    description: str
    action: Optional[CommandAction] = None
    alt_name: Optional[str] = None
    sub_commands: List["SlashCommand"] = field(default_factory=list)
    completion: Optional[CommandCompletion] = None

    def matches(self, token: str) -> bool:
        return token in (self.name, self.alt_name)

    def find_sub_command(self, token: str) -> Optional["SlashCommand"]:
        for sub in self.sub_commands:
            if sub.matches(token):
                return sub
        return None


class CommandRegistry:
    """Registry for CLI slash commands."""

    def __init__(self) -> None:
        self._commands: Dict[str, SlashCommand] = {}

    def register(self, command: SlashCommand) -> None:
        self._commands[command.name.lstrip("/")] = command

    def get(self, name: str) -> Optional[SlashCommand]:
        token = name.lstrip("/")
        command = self._commands.get(token)
        if command is not None:
            return command
        for candidate in self._commands.values():
            if candidate.alt_name == token:
                return candidate
        return None

    def names(self) -> List[str]:
        names: List[str] = []
        for command in self._commands.values():
            names.append(f"/{command.name}")
            if command.alt_name:
                names.append(f"/{command.alt_name}")
        return names

    def descriptions(self) -> List[str]:
        lines: List[str] = []
        for cmd in self._commands.values():
            alias = f" (/{cmd.alt_name})" if cmd.alt_name else ""
            lines.append(f"/{cmd.name}{alias} — {cmd.description}")
            for sub in cmd.sub_commands:
                lines.append(f"  {sub.name} — {sub.description}")
        return lines

    def resolve(self, text: str) -> tuple[Optional[SlashCommand], str]:
        """Walk ``/cmd sub ... args`` down to the deepest matching command."""
        stripped = text.strip()
        if not stripped.startswith("/"):
            return None, ""
        head, _, rest = stripped[1:].partition(" ")
        command = self.get(head)
        if command is None:
            return None, ""
        args = rest.strip()
        while command.sub_commands and args:
            token, _, remainder = args.partition(" ")
            sub = command.find_sub_command(token)
            if sub is None:
                break
            command = sub
            args = remainder.strip()
        return command, args
