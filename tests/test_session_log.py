import tempfile
import unittest
from pathlib import Path

from tasklane.config.paths import TasklanePaths
from tasklane.core.session_log import (
    SessionLogger,
    get_active_logger,
    log_debug,
    log_error,
    log_info,
    resolve_debug_config,
    set_active_logger,
)


def _log_text(paths: TasklanePaths) -> str:
    files = list(paths.logs_dir.glob("tasklane_session_*.md"))
    assert len(files) == 1
    return files[0].read_text(encoding="utf-8")


class SessionLoggerTests(unittest.TestCase):
    def test_logger_disabled_creates_no_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            logger = SessionLogger(paths, None)
            logger.log_command("cli", "/bg list")
            logger.log_level("cli", "error", "boom")
            self.assertFalse(paths.logs_dir.exists())

    def test_log_command_writes_markdown(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            logger = SessionLogger(paths, "session")
            logger.log_command("cli", "/bg start hello")
            logger.log_command_result("cli", kind="info", content="Started")
            logger.close()
            text = _log_text(paths)
            self.assertTrue(text.startswith("# Tasklane Session Log"))
            self.assertIn("command.input", text)
            self.assertIn("/bg start hello", text)
            self.assertIn("command.result.info", text)
            self.assertLess(text.index("command.result.info"), text.index("command.input"))

    def test_interaction_ids_are_recorded(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            logger = SessionLogger(paths, "session")
            interaction = logger.start_interaction("cli", summary="restore")
            logger.log_command("cli", "/restore x")
            logger.end_interaction("cli", status="done")
            self.assertEqual(interaction, 1)
            text = _log_text(paths)
            self.assertIn("session.interaction.start", text)
            self.assertIn("interaction 1", text)

    def test_session_only_skips_level_events(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            logger = SessionLogger(paths, "session")
            logger.log_command("cli", "/help")
            logger.log_level("cli", "error", "oops")
            self.assertNotIn("oops", _log_text(paths))

    def test_exception_logging_includes_traceback(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            logger = SessionLogger(paths, "error")
            try:
                raise ValueError("bad checkpoint")
            except ValueError as exc:
                logger.log_exception("restore", exc)
            text = _log_text(paths)
            self.assertIn("error/restore", text)
            self.assertIn("bad checkpoint", text)
            self.assertIn("Traceback", text)

    def test_module_helpers_use_active_logger(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            logger = SessionLogger(paths, "info")
            set_active_logger(logger)
            try:
                self.assertIs(get_active_logger(), logger)
                log_info("agent", "task.started", {"task_id": "abc"})
                log_error("agent", "task.failed")
                log_debug("radio", "number.commit")
            finally:
                set_active_logger(None)
            text = _log_text(paths)
            self.assertIn("task.started", text)
            self.assertIn("task.failed", text)
            self.assertNotIn("number.commit", text)
            log_info("agent", "after.reset")
            self.assertNotIn("after.reset", _log_text(paths))

    def test_resolve_debug_config(self) -> None:
        selection = resolve_debug_config("warn")
        self.assertEqual(selection.enabled_levels, {"error", "warn"})
        self.assertEqual(selection.enabled_types, frozenset())
        selection = resolve_debug_config(True)
        self.assertIn("session", selection.enabled_types)
        self.assertIn("debug", selection.enabled_levels)
        selection = resolve_debug_config(["session", "off", "error", 3])
        self.assertEqual(selection.enabled_types, {"session"})
        self.assertEqual(selection.enabled_levels, {"error"})
        self.assertEqual(resolve_debug_config("off").enabled_levels, frozenset())


if __name__ == "__main__":
    unittest.main()
