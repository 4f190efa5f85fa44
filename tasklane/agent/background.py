from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Optional, Protocol

from ..core.session_log import log_info

TaskState = Literal[
    "submitted",
    "working",
    "input-required",
    "completed",
    "failed",
    "canceled",
]


class TaskNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class AgentMessage:
    role: Literal["user", "agent"]
    parts: tuple[dict[str, Any], ...]

    @classmethod
    def text(cls, role: Literal["user", "agent"], text: str) -> "AgentMessage":
        return cls(role=role, parts=({"text": text},))


@dataclass(frozen=True)
class TaskStatus:
    state: TaskState
    message: Optional[AgentMessage] = None


@dataclass
class BackgroundAgentTask:
    id: str
    status: TaskStatus
    history: list[AgentMessage] = field(default_factory=list)

    def status_text(self) -> str:
        parts = self.status.message.parts if self.status.message else ()
        return parts_to_string(parts)


def parts_to_string(parts: Iterable[Any]) -> str:
    """Flatten message parts into text, ignoring parts without text."""
    chunks: list[str] = []
    for part in parts:
        if isinstance(part, str):
            chunks.append(part)
        elif isinstance(part, dict) and isinstance(part.get("text"), str):
            chunks.append(part["text"])
    return "".join(chunks)


class BackgroundAgent(Protocol):
    name: str

    async def start_task(self, prompt: str) -> str: ...

    async def cancel_task(self, task_id: str) -> None: ...

    async def list_tasks(self) -> list[BackgroundAgentTask]: ...

    async def get_task(self, task_id: str) -> BackgroundAgentTask: ...

    async def message_task(self, task_id: str, message: str) -> None: ...

    async def delete_task(self, task_id: str) -> None: ...


class BackgroundAgentManager:
    """Holds the configured background agents and which one is active."""

    def __init__(self, agents: Iterable[BackgroundAgent] = ()) -> None:
        self._agents: dict[str, BackgroundAgent] = {}
        self._active: Optional[str] = None
        for agent in agents:
            self.add(agent)

    @property
    def active_agent(self) -> Optional[BackgroundAgent]:
        if self._active is None:
            return None
        return self._agents.get(self._active)

    def add(self, agent: BackgroundAgent) -> None:
        self._agents[agent.name] = agent
        if self._active is None:
            self._active = agent.name

    def set_active(self, name: str) -> None:
        if name not in self._agents:
            raise KeyError(name)
        self._active = name

    def names(self) -> list[str]:
        return list(self._agents)


class LocalBackgroundAgent:
    """In-process agent that tracks tasks in memory."""

    def __init__(self, name: str = "local") -> None:
        self.name = name
        self._tasks: dict[str, BackgroundAgentTask] = {}

    async def start_task(self, prompt: str) -> str:
        task_id = uuid.uuid4().hex[:8]
        message = AgentMessage.text("user", prompt)
        self._tasks[task_id] = BackgroundAgentTask(
            id=task_id,
            status=TaskStatus(state="submitted", message=message),
            history=[message],
        )
        log_info("agent", "task.started", {"agent": self.name, "task_id": task_id})
        return task_id

    async def cancel_task(self, task_id: str) -> None:
        task = self._require(task_id)
        task.status = TaskStatus(
            state="canceled", message=AgentMessage.text("agent", "Task canceled.")
        )
        log_info("agent", "task.canceled", {"agent": self.name, "task_id": task_id})

    async def list_tasks(self) -> list[BackgroundAgentTask]:
        return list(self._tasks.values())

    async def get_task(self, task_id: str) -> BackgroundAgentTask:
        return self._require(task_id)

    async def message_task(self, task_id: str, message: str) -> None:
        task = self._require(task_id)
        note = AgentMessage.text("user", message)
        task.history.append(note)
        if task.status.state == "input-required":
            task.status = TaskStatus(state="working", message=note)

    async def delete_task(self, task_id: str) -> None:
        self._require(task_id)
        del self._tasks[task_id]
        log_info("agent", "task.deleted", {"agent": self.name, "task_id": task_id})

    def update_status(
        self, task_id: str, state: TaskState, text: Optional[str] = None
    ) -> None:
        """Record progress reported by whatever is executing the task."""
        task = self._require(task_id)
        message = AgentMessage.text("agent", text) if text is not None else None
        task.status = TaskStatus(state=state, message=message)
        if message is not None:
            task.history.append(message)

    def _require(self, task_id: str) -> BackgroundAgentTask:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(f"No background task with id '{task_id}'.")
        return task
