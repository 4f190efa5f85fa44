import unittest

from tasklane.cli.commands import CommandRegistry, SlashCommand


async def _noop(context, args):  # type: ignore[no-untyped-def]
    return None


class CommandRegistryTests(unittest.TestCase):
    def setUp(self) -> None:
        self.registry = CommandRegistry()
        self.start = SlashCommand("start", "Start a task", _noop)
        self.list = SlashCommand("list", "List tasks", _noop)
        self.registry.register(
            SlashCommand(
                "background",
                "Manage tasks",
                alt_name="bg",
                sub_commands=[self.start, self.list],
            )
        )
        self.registry.register(SlashCommand("help", "Show help", _noop))

    def test_register_and_lookup(self) -> None:
        self.assertIn("/background", self.registry.names())
        self.assertIn("/bg", self.registry.names())
        self.assertIs(self.registry.get("/bg"), self.registry.get("background"))
        self.assertIsNone(self.registry.get("/missing"))
        descriptions = self.registry.descriptions()
        self.assertTrue(any("(/bg)" in line for line in descriptions))
        self.assertTrue(any("Start a task" in line for line in descriptions))

    def test_resolve_walks_sub_commands(self) -> None:
        command, args = self.registry.resolve("/bg start  write the docs ")
        self.assertIs(command, self.start)
        self.assertEqual(args, "write the docs")

    def test_resolve_keeps_parent_for_unknown_sub_command(self) -> None:
        command, args = self.registry.resolve("/background frobnicate x")
        self.assertEqual(command.name, "background")  # type: ignore[union-attr]
        self.assertEqual(args, "frobnicate x")

    def test_resolve_rejects_plain_text_and_unknown(self) -> None:
        self.assertEqual(self.registry.resolve("hello"), (None, ""))
        self.assertEqual(self.registry.resolve("/nope"), (None, ""))

    def test_resolve_command_without_args(self) -> None:
        command, args = self.registry.resolve("/help")
        self.assertEqual(command.name, "help")  # type: ignore[union-attr]
        self.assertEqual(args, "")


if __name__ == "__main__":
    unittest.main()
