from __future__ import annotations

import re
from typing import Optional

from ..agent.background import BackgroundAgent, BackgroundAgentManager, BackgroundAgentTask
from .commands import CommandContext, CommandError, CommandResult, MessageAction, SlashCommand

MAX_STATUS_MESSAGE_LENGTH = 100
_NEWLINES = re.compile(r"\r?\n|\r")


def _status_string(task: BackgroundAgentTask) -> str:
    return task.status_text().strip()


def _active_agent(context: CommandContext) -> BackgroundAgent:
    manager = context.services.agents
    agent = manager.active_agent if manager is not None else None
    if agent is None:
        raise CommandError("There is no active background agent.")
    return agent


def _add_client_history(context: CommandContext, text: str) -> None:
    context.services.client.add_text("user", text)
    context.services.client.add_text("model", "Got it.")


def _error(content: str) -> MessageAction:
    return MessageAction("error", content)


def _info(content: str) -> MessageAction:
    return MessageAction("info", content)


async def _start(context: CommandContext, args: str) -> CommandResult:
    if not args.strip():
        return _error("The `start` command requires a prompt.")
    task_id = await _active_agent(context).start_task(args)
    _add_client_history(
        context, f"I started a background task with id '{task_id}' and prompt:\n{args}"
    )
    return _info(f"Started background task with id '{task_id}' and prompt:\n{args}")


async def _stop(context: CommandContext, args: str) -> CommandResult:
    if not args.strip():
        return _error("The `stop` command requires a task id.")
    await _active_agent(context).cancel_task(args)
    _add_client_history(context, f"I canceled the background task with id {args}")
    return _info(f"Stopped background task with id {args}.")


async def _list(context: CommandContext, args: str) -> CommandResult:
    if args.strip():
        return _error("The `list` command takes no arguments.")
    tasks = await _active_agent(context).list_tasks()
    if not tasks:
        return _info("No background tasks found.")
    lines = []
    for task in tasks:
        status = _NEWLINES.sub(" ", _status_string(task))
        if len(status) > MAX_STATUS_MESSAGE_LENGTH:
            status = status[:MAX_STATUS_MESSAGE_LENGTH] + "..."
        lines.append(f"  - {task.id}: ({task.status.state}) {status}")
    return _info("Background tasks:\n" + "\n".join(lines))


async def _get(context: CommandContext, args: str) -> CommandResult:
    if not args.strip():
        return _error("The `get` command requires a task id.")
    task = await _active_agent(context).get_task(args)
    return _info(
        f"Task Details for {task.id}:\nStatus: ({task.status.state}) {_status_string(task)}"
    )


async def _logs(context: CommandContext, args: str) -> CommandResult:
    if not args.strip():
        return _error("The `logs` command requires a task id.")
    task = await _active_agent(context).get_task(args)
    return _info(
        f"Task logs for {task.id}. status: ({task.status.state})\n{task.status_text()}"
    )


async def _message(context: CommandContext, args: str) -> CommandResult:
    task_id, _, message = args.strip().partition(" ")
    if not task_id or not message.strip():
        return _error("The `message` command requires a task id and a message.")
    await _active_agent(context).message_task(task_id, message)
    _add_client_history(
        context, f"I sent a message to the background task with id '{task_id}':\n{message}"
    )
    return _info(f"Sent a message to the background task with id '{task_id}':\n{message}")


async def _delete(context: CommandContext, args: str) -> CommandResult:
    if not args.strip():
        return _error("The `delete` command requires a task id.")
    await _active_agent(context).delete_task(args)
    _add_client_history(context, f"I deleted the background task with id {args}")
    return _info(f"Task {args} deleted.")


async def _task_id_completion(context: CommandContext, partial: str) -> list[str]:
    manager = context.services.agents
    agent = manager.active_agent if manager is not None else None
    if agent is None:
        return []
    tasks = await agent.list_tasks()
    return [task.id for task in tasks if task.id.startswith(partial)]


def background_command(agents: Optional[BackgroundAgentManager]) -> Optional[SlashCommand]:
    if agents is None:
        return None
    return SlashCommand(
        name="background",
        alt_name="bg",
        description="Commands for managing the background agent's tasks",
        sub_commands=[
            SlashCommand("start", "Start a new task with the provided prompt", _start),
            SlashCommand("stop", "Stops a running task", _stop, completion=_task_id_completion),
            SlashCommand("list", "List all tasks", _list),
            SlashCommand("get", "View a task", _get, completion=_task_id_completion),
            SlashCommand("logs", "View a task's recent logs", _logs, completion=_task_id_completion),
            SlashCommand("message", "Send a message to a task", _message, completion=_task_id_completion),
            SlashCommand("delete", "Deletes a task.", _delete, completion=_task_id_completion),
        ],
    )
