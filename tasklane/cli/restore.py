from __future__ import annotations

import time
from typing import Optional

from ..config.manager import TasklaneSettings
from ..core.checkpoints import CheckpointStore, checkpoint_file_name
from ..core.history import HistoryItem
from ..core.session_log import log_exception, log_info
from .commands import CommandContext, CommandResult, MessageAction, SlashCommand, ToolAction


def _store(context: CommandContext) -> CheckpointStore:
    return CheckpointStore(context.services.paths.checkpoints_dir)


async def _restore(context: CommandContext, args: str) -> CommandResult:
    store = _store(context)
    try:
        store.ensure_dir()
        json_files = store.list_files()
        if not args:
            if not json_files:
                return MessageAction("info", "No restorable tool calls found.")
            names = "\n".join(name[: -len(".json")] for name in json_files)
            return MessageAction("info", f"Available tool calls to restore:\n\n{names}")

        selected = checkpoint_file_name(args)
        if selected not in json_files:
            return MessageAction("error", f"File not found: {selected}")

        data = store.read(selected)
        history = data.get("history")
        if isinstance(history, list) and history:
            items = [item for item in map(HistoryItem.from_dict, history) if item]
            context.ui.load_history(items)
        client_history = data.get("clientHistory")
        if isinstance(client_history, list) and client_history:
            await context.services.client.set_history(client_history)
        commit_hash = data.get("commitHash")
        git = context.services.git
        if commit_hash and git is not None:
            git.restore_project_from_snapshot(commit_hash)
            context.ui.add_item(
                HistoryItem("info", "Restored project to the state before the tool call."),
                time.time(),
            )
        tool_call = data.get("toolCall") or {}
        log_info("restore", "checkpoint.restored", {"checkpoint": selected})
        return ToolAction(
            tool_name=str(tool_call.get("name", "")),
            tool_args=dict(tool_call.get("args") or {}),
        )
    except Exception as exc:  # noqa: BLE001
        log_exception("restore", exc)
        return MessageAction(
            "error", f"Could not read restorable tool calls. This is the error: {exc}"
        )


async def _completion(context: CommandContext, partial: str) -> list[str]:
    try:
        names = _store(context).list_names()
    except OSError:
        return []
    return [name for name in names if name.startswith(partial)]


def restore_command(settings: TasklaneSettings) -> Optional[SlashCommand]:
    if not settings.checkpointing:
        return None
    return SlashCommand(
        name="restore",
        description=(
            "Restore a tool call. This will reset the conversation and file history "
            "to the state it was in when the tool call was suggested"
        ),
        action=_restore,
        completion=_completion,
    )
