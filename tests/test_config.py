import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from rich.console import Console

from tasklane.config import ConfigManager
from tasklane.config.paths import TasklanePaths


class ConfigManagerTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.home = Path(self._tmp.name) / "home"
        self.root = Path(self._tmp.name) / "project"
        self.home.mkdir()
        self.root.mkdir()
        self._env = mock.patch.dict(os.environ, {"HOME": str(self.home)})
        self._env.start()
        self.console = Console(record=True, force_terminal=False, color_system=None)
        self.paths = TasklanePaths(self.root)
        self.manager = ConfigManager(self.paths, console=self.console)

    def tearDown(self) -> None:
        self._env.stop()
        self._tmp.cleanup()

    def test_defaults_without_files(self) -> None:
        settings = self.manager.load_settings()
        self.assertTrue(settings.checkpointing)
        self.assertTrue(settings.background_agent)
        self.assertEqual(settings.select_window_size, 10)
        self.assertTrue(settings.show_scroll_arrows)
        self.assertFalse(settings.debug)

    def test_workspace_overrides_global(self) -> None:
        self.paths.global_dir.mkdir()
        self.paths.global_config_file.write_text(
            json.dumps({"checkpointing": False, "select_window_size": 5}), encoding="utf-8"
        )
        self.paths.tasklane_dir.mkdir()
        self.paths.config_file.write_text(
            json.dumps({"select_window_size": "7", "show_scroll_arrows": "no"}),
            encoding="utf-8",
        )
        settings = self.manager.load_settings()
        self.assertFalse(settings.checkpointing)
        self.assertEqual(settings.select_window_size, 7)
        self.assertFalse(settings.show_scroll_arrows)

    def test_invalid_window_size_falls_back(self) -> None:
        self.paths.tasklane_dir.mkdir()
        self.paths.config_file.write_text(
            json.dumps({"select_window_size": 0, "background_agent": "maybe"}), encoding="utf-8"
        )
        settings = self.manager.load_settings()
        self.assertEqual(settings.select_window_size, 10)
        self.assertTrue(settings.background_agent)

    def test_bad_json_reports_and_uses_defaults(self) -> None:
        self.paths.tasklane_dir.mkdir()
        self.paths.config_file.write_text("{not json", encoding="utf-8")
        settings = self.manager.load_settings()
        self.assertTrue(settings.checkpointing)
        self.assertIn("Failed to parse JSON config", self.console.export_text())

    def test_set_debug_persists(self) -> None:
        self.manager.set_debug("info")
        self.assertEqual(self.manager.load_settings().debug, "info")
        data = json.loads(self.paths.config_file.read_text(encoding="utf-8"))
        self.assertTrue(data["checkpointing"])

    def test_set_debug_keeps_user_values(self) -> None:
        self.paths.tasklane_dir.mkdir()
        self.paths.config_file.write_text(
            json.dumps({"checkpointing": False, "extra": 1}), encoding="utf-8"
        )
        self.manager.set_debug(True)
        data = json.loads(self.paths.config_file.read_text(encoding="utf-8"))
        self.assertFalse(data["checkpointing"])
        self.assertEqual(data["extra"], 1)
        self.assertIs(data["debug"], True)


if __name__ == "__main__":
    unittest.main()
