from __future__ import annotations

from typing import Any

from claude_agent_sdk import ClaudeAgentOptions, SdkMcpTool, create_sdk_mcp_server, tool

BACKGROUND_SERVER_NAME = "background-agent"
BACKGROUND_SERVER_VERSION = "1.0.0"
BACKGROUND_ALLOWED_TOOLS = [f"mcp__{BACKGROUND_SERVER_NAME}__startTask"]


def create_background_agent_tools() -> list[SdkMcpTool]:
    @tool(
        "startTask",
        "Launches a new task asynchronously.",
        {"prompt": str},
    )
    async def start_task_tool(args: dict[str, Any]) -> dict[str, Any]:
        prompt = args.get("prompt")
        return {
            "content": [
                {"type": "text", "text": prompt if isinstance(prompt, str) else ""}
            ]
        }

    return [start_task_tool]


def create_background_agent_server() -> Any:
    return create_sdk_mcp_server(
        name=BACKGROUND_SERVER_NAME,
        version=BACKGROUND_SERVER_VERSION,
        tools=create_background_agent_tools(),
    )


def build_agent_options() -> ClaudeAgentOptions:
    """Options exposing the background-agent tools to a Claude agent session."""
    return ClaudeAgentOptions(
        mcp_servers={BACKGROUND_SERVER_NAME: create_background_agent_server()},
        allowed_tools=list(BACKGROUND_ALLOWED_TOOLS),
    )
