import unittest

from tasklane.agent.server import (
    BACKGROUND_ALLOWED_TOOLS,
    build_agent_options,
    create_background_agent_tools,
)


class BackgroundAgentToolsTests(unittest.IsolatedAsyncioTestCase):
    async def test_start_task_echoes_prompt(self) -> None:
        tools = {tool.name: tool for tool in create_background_agent_tools()}
        self.assertEqual(set(tools), {"startTask"})
        start = tools["startTask"]
        self.assertEqual(start.description, "Launches a new task asynchronously.")
        result = await start.handler({"prompt": "index the repo"})
        self.assertEqual(result["content"][0]["text"], "index the repo")

    async def test_start_task_without_prompt(self) -> None:
        start = create_background_agent_tools()[0]
        result = await start.handler({})
        self.assertEqual(result["content"], [{"type": "text", "text": ""}])

    def test_agent_options_expose_server(self) -> None:
        options = build_agent_options()
        self.assertIn("background-agent", options.mcp_servers)
        self.assertEqual(options.allowed_tools, BACKGROUND_ALLOWED_TOOLS)
        self.assertEqual(BACKGROUND_ALLOWED_TOOLS, ["mcp__background-agent__startTask"])


if __name__ == "__main__":
    unittest.main()
