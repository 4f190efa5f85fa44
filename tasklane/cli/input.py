from __future__ import annotations

from typing import AsyncGenerator, Callable, Iterable, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from ..core.session_log import log_exception
from .commands import CommandContext, CommandRegistry, SlashCommand


class _CompletionTarget:
    def __init__(
        self,
        partial: str,
        command: Optional[SlashCommand] = None,
        *,
        sub_commands: bool = False,
        argument: bool = False,
    ) -> None:
        self.partial = partial
        self.command = command
        self.sub_commands = sub_commands
        self.argument = argument


class TasklaneCompleter(Completer):
    """Suggests slash commands, sub-commands and command arguments while typing."""

    def __init__(
        self,
        registry: CommandRegistry,
        context_provider: Callable[[], CommandContext],
    ) -> None:
        self.registry = registry
        self.context_provider = context_provider

    def get_completions(self, document: Document, complete_event):  # type: ignore[override]
        target = self._target(document.text_before_cursor)
        if target is None:
            return
        yield from self._static_completions(target)

    async def get_completions_async(  # type: ignore[override]
        self, document: Document, complete_event
    ) -> AsyncGenerator[Completion, None]:
        target = self._target(document.text_before_cursor)
        if target is None:
            return
        for completion in self._static_completions(target):
            yield completion
        command = target.command
        if not target.argument or command is None or command.completion is None:
            return
        try:
            options = await command.completion(self.context_provider(), target.partial)
        except Exception as exc:  # noqa: BLE001
            log_exception("completer", exc)
            return
        for option in options:
            yield Completion(option, start_position=-len(target.partial))

    def _static_completions(self, target: _CompletionTarget) -> Iterable[Completion]:
        partial = target.partial
        if target.command is None:
            return [
                Completion(name, start_position=-len(partial))
                for name in self.registry.names()
                if name.startswith(partial)
            ]
        if target.sub_commands:
            return [
                Completion(sub.name, start_position=-len(partial), display_meta=sub.description)
                for sub in target.command.sub_commands
                if sub.name.startswith(partial)
            ]
        return []

    def _target(self, text: str) -> Optional[_CompletionTarget]:
        if not text.startswith("/"):
            return None
        tokens = text.split()
        if text.endswith(" "):
            done, partial = tokens, ""
        else:
            done, partial = tokens[:-1], tokens[-1]
        if not done:
            return _CompletionTarget(partial)
        command = self.registry.get(done[0])
        if command is None:
            return None
        remaining = done[1:]
        while remaining and command.sub_commands:
            sub = command.find_sub_command(remaining[0])
            if sub is None:
                break
            command = sub
            remaining = remaining[1:]
        if remaining:
            return _CompletionTarget(partial, command)
        if command.sub_commands:
            return _CompletionTarget(partial, command, sub_commands=True)
        return _CompletionTarget(partial, command, argument=True)
