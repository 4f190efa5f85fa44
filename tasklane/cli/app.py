from __future__ import annotations

import argparse
import asyncio
import errno
import json
import time
from pathlib import Path
from typing import Any, Optional

from claude_agent_sdk import ClaudeAgentOptions
from prompt_toolkit import PromptSession
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.text import Text

from ..agent import BackgroundAgentManager, LocalBackgroundAgent, build_agent_options
from ..config import ConfigManager
from ..config.paths import TasklanePaths
from ..core.git_snapshot import GitSnapshotService
from ..core.history import ConversationHistory, HistoryItem
from ..core.session_log import (
    LOG_LEVELS,
    SessionLogger,
    log_error,
    log_exception,
    resolve_debug_config,
    set_active_logger,
)
from ..ui.radio_select import RadioSelectItem
from ..ui.radio_widget import run_radio_select
from .background import background_command
from .commands import (
    CommandContext,
    CommandRegistry,
    CommandResult,
    CommandServices,
    CommandUI,
    MessageAction,
    QuitAction,
    SlashCommand,
    ToolAction,
)
from .input import TasklaneCompleter
from .restore import restore_command

DEBUG_PRESETS: list[tuple[str, Any]] = [
    ("off", False),
    ("session", "session"),
    *[(level, level) for level in LOG_LEVELS],
    ("all", True),
]
ITEM_STYLES = {"info": "cyan", "error": "red", "user": "bold", "tool": "magenta"}


class TasklaneCLI:
    """Interactive CLI interface for Tasklane."""

    def __init__(
        self,
        root: Optional[Path] = None,
        console: Optional[Console] = None,
        *,
        interactive_prompts: bool = True,
        agents: Optional[BackgroundAgentManager] = None,
        git: Optional[GitSnapshotService] = None,
    ) -> None:
        self.root = (root or Path.cwd()).resolve()
        self.console = console or Console()
        self.paths = TasklanePaths(self.root)
        self.config_manager = ConfigManager(self.paths, console=self.console)
        self.settings = self.config_manager.load_settings()
        self.session_logger = SessionLogger(self.paths, self.settings.debug)
        set_active_logger(self.session_logger)
        self.client = ConversationHistory(self.paths)
        if agents is None and self.settings.background_agent:
            agents = BackgroundAgentManager([LocalBackgroundAgent()])
        self.agents = agents
        self.agent_options: Optional[ClaudeAgentOptions] = (
            build_agent_options() if agents is not None else None
        )
        self.git = git or GitSnapshotService(self.root)
        self.history: list[HistoryItem] = []
        self.registry = CommandRegistry()
        self._interactive_prompts = interactive_prompts
        self._shutting_down = False
        self._register_commands()
        self.session: Optional[PromptSession] = None
        if interactive_prompts:
            self.session = PromptSession(
                completer=TasklaneCompleter(self.registry, self.command_context),
                complete_while_typing=True,
            )

    def _register_commands(self) -> None:
        """Register built-in CLI commands; keeps CLI extensible."""
        for command in (
            background_command(self.agents),
            restore_command(self.settings),
        ):
            if command is not None:
                self.registry.register(command)
        self.registry.register(
            SlashCommand(
                "debug",
                "Configure debug logging: /debug [off|session|error|warn|info|debug|all].",
                self._cmd_debug,
                completion=self._complete_debug,
            )
        )
        self.registry.register(
            SlashCommand("help", "Show Tasklane usage and available commands.", self._cmd_help)
        )
        self.registry.register(
            SlashCommand("exit", "Exit Tasklane CLI gracefully.", self._cmd_exit, alt_name="quit")
        )

    def command_context(self) -> CommandContext:
        return CommandContext(
            services=CommandServices(
                settings=self.settings,
                paths=self.paths,
                client=self.client,
                agents=self.agents,
                git=self.git if self.git.available() else None,
            ),
            ui=CommandUI(add_item=self._add_item, load_history=self._load_history),
        )

    def _add_item(self, item: HistoryItem, timestamp: float) -> None:
        self.history.append(item)
        style = ITEM_STYLES.get(item.type, "")
        self.console.print(Text(item.text, style=style))

    def _load_history(self, items: list[HistoryItem]) -> None:
        self.history = list(items)
        self.console.print(
            Panel(
                Text("\n".join(f"[{item.type}] {item.text}" for item in items) or "(empty)"),
                title=f"Restored {len(items)} history item(s)",
                border_style="cyan",
            ),
            highlight=False,
        )

    async def _handle_command(self, text: str) -> bool:
        command, args = self.registry.resolve(text)
        if command is None:
            log_error("cli", "command.unknown", {"command": text})
            available = "\n".join(self.registry.descriptions())
            self.console.print(
                Panel(
                    Text(f"Unknown command: {text}\nAvailable commands:\n{available}"),
                    title="Unknown Command",
                    border_style="red",
                )
            )
            return True
        self.session_logger.log_command("cli", text)
        if command.action is None:
            self._show_sub_commands(command)
            return True
        try:
            result = await command.action(self.command_context(), args)
        except Exception as exc:  # noqa: BLE001
            log_exception("cli", exc)
            self._add_item(HistoryItem("error", str(exc)), time.time())
            return True
        return await self._apply_result(result)

    async def _apply_result(self, result: CommandResult) -> bool:
        if isinstance(result, MessageAction):
            self.session_logger.log_command_result(
                "cli", kind=result.message_type, content=result.content
            )
            self._add_item(HistoryItem(result.message_type, result.content), time.time())
            return True
        if isinstance(result, ToolAction):
            self.session_logger.log_command_result(
                "cli", kind="tool", content={"name": result.tool_name, "args": result.tool_args}
            )
            args_text = json.dumps(result.tool_args, ensure_ascii=False, indent=2)
            self.history.append(HistoryItem("tool", f"{result.tool_name} {args_text}"))
            self.console.print(
                Panel(
                    Text(f"Tool: {result.tool_name}\nArgs:\n{args_text}"),
                    title="Restored Tool Call",
                    border_style="magenta",
                ),
                highlight=False,
            )
            return True
        if isinstance(result, QuitAction):
            await self._graceful_exit()
            return False
        return True

    def _show_sub_commands(self, command: SlashCommand) -> None:
        lines = [f"{sub.name} — {sub.description}" for sub in command.sub_commands]
        self.console.print(
            Panel(
                "\n".join(lines) or command.description,
                title=f"/{command.name}",
                border_style="cyan",
            )
        )

    async def _cmd_debug(self, context: CommandContext, args: str) -> CommandResult:
        presets = dict(DEBUG_PRESETS)
        arg = args.strip().lower()
        if not arg:
            if not self._interactive_prompts:
                return MessageAction("info", f"Debug logging: {self._debug_label()}")
            labels = [label for label, _ in DEBUG_PRESETS]
            current = self._debug_label()
            choice = await run_radio_select(
                [RadioSelectItem(label=label, value=label) for label in labels],
                title="Select debug logging level",
                initial_index=labels.index(current) if current in labels else 0,
                window_size=self.settings.select_window_size,
                show_scroll_arrows=self.settings.show_scroll_arrows,
            )
            if choice is None:
                return MessageAction("info", "Debug configuration unchanged.")
            arg = choice
        if arg not in presets:
            return MessageAction(
                "error", f"Unknown debug option: {arg}. Use one of: {', '.join(presets)}."
            )
        value = presets[arg]
        self.config_manager.set_debug(value)
        self.settings = self.config_manager.load_settings()
        self.session_logger.configure(value)
        return MessageAction("info", f"Debug logging set to {arg}.")

    async def _complete_debug(self, context: CommandContext, partial: str) -> list[str]:
        return [label for label, _ in DEBUG_PRESETS if label.startswith(partial)]

    def _debug_label(self) -> str:
        raw = self.settings.debug
        selection = resolve_debug_config(raw)
        if not selection.enabled_types and not selection.enabled_levels:
            return "off"
        if raw is True:
            return "all"
        if isinstance(raw, str):
            return raw.strip().lower()
        return ", ".join(sorted(selection.enabled_types | selection.enabled_levels))

    async def _cmd_help(self, context: CommandContext, args: str) -> CommandResult:
        command_list = "\n".join(f"- {line}" for line in self.registry.descriptions()) or "- (none)"
        body = "\n".join(
            [
                "# Tasklane Help",
                "",
                "## Commands",
                command_list,
                "",
                "## Selection lists",
                "- ↑/↓ or k/j: move (wraps around)",
                "- 1-9: jump to an item; keep typing for multi-digit numbers",
                "- Enter: confirm, Esc/Ctrl+C: cancel",
                "",
                "## Workspace Files",
                "- `.tasklane/tasklane.json`: workspace config",
                "- `.tasklane/history.json`: conversation history",
                "- `.tasklane/tmp/checkpoints/`: restorable tool calls",
                "- `.tasklane/logs/`: debug session logs",
            ]
        )
        self.console.print(
            Panel(Markdown(body, code_theme="monokai"), title="💡 Help", border_style="cyan")
        )
        return None

    async def _cmd_exit(self, context: CommandContext, args: str) -> CommandResult:
        return QuitAction()

    async def _read_input(self, prompt: str = "tasklane> ") -> str:
        if self.session is not None:
            return await self.session.prompt_async(prompt)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: input(prompt))

    def _print_banner(self) -> None:
        from tasklane import __version__

        lines = [
            f"Tasklane v{__version__}",
            f"Workspace: {self.root}",
            f"Background agent: {'enabled' if self.agents else 'disabled'}",
            f"Agent tools: {', '.join(self._agent_tools()) or 'none'}",
            f"Checkpointing: {'enabled' if self.settings.checkpointing else 'disabled'}",
            "Reminders: /help for usage • Ctrl+C to exit",
        ]
        self.console.print(Panel("\n".join(lines), title="Tasklane", expand=True, padding=(1, 2)))

    def _agent_tools(self) -> list[str]:
        if self.agent_options is None:
            return []
        return list(self.agent_options.allowed_tools)

    async def run(self) -> None:
        self._print_banner()
        try:
            while True:
                try:
                    raw = await self._read_input()
                except (EOFError, KeyboardInterrupt):
                    break
                text = (raw or "").strip()
                if not text:
                    continue
                if text.startswith("/"):
                    if not await self._handle_command(text):
                        break
                    continue
                self.console.print(
                    Panel(
                        "Use /bg start <prompt> to hand work to the background agent, "
                        "or /help for all commands.",
                        title="Tasklane",
                        border_style="cyan",
                    )
                )
        except Exception as exc:  # noqa: BLE001
            log_exception("cli", exc)
            raise
        finally:
            await self._graceful_exit()

    async def _graceful_exit(self) -> None:
        if self._shutting_down:
            return
        self._shutting_down = True
        self.session_logger.close()
        set_active_logger(None)
        try:
            self.console.print(
                Panel("Exiting Tasklane. See you soon!", title="Goodbye", border_style="cyan")
            )
        except BrokenPipeError:
            return


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Tasklane CLI - manage background agent tasks from the terminal"
    )
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    args, _ = parser.parse_known_args()
    if args.version:
        from tasklane import __version__

        print(f"tasklane {__version__}")
        return
    try:
        asyncio.run(TasklaneCLI().run())
    except BrokenPipeError:
        return
    except KeyboardInterrupt:
        return
    except OSError as exc:
        if exc.errno == errno.EPIPE:
            return
        log_exception("cli", exc)
        raise


if __name__ == "__main__":
    main()
