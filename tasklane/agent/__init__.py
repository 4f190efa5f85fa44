from .background import (
    AgentMessage,
    BackgroundAgent,
    BackgroundAgentManager,
    BackgroundAgentTask,
    LocalBackgroundAgent,
    TaskNotFoundError,
    TaskStatus,
    parts_to_string,
)
from .server import build_agent_options, create_background_agent_server

__all__ = [
    "AgentMessage",
    "BackgroundAgent",
    "BackgroundAgentManager",
    "BackgroundAgentTask",
    "LocalBackgroundAgent",
    "TaskNotFoundError",
    "TaskStatus",
    "build_agent_options",
    "create_background_agent_server",
    "parts_to_string",
]
