import json
import shutil
import subprocess
import tempfile
import unittest
from pathlib import Path

from tasklane.config.paths import TasklanePaths
from tasklane.core.checkpoints import CheckpointStore, checkpoint_file_name
from tasklane.core.git_snapshot import GitSnapshotError, GitSnapshotService
from tasklane.core.history import ConversationHistory, HistoryItem


class ConversationHistoryTests(unittest.IsolatedAsyncioTestCase):
    async def test_history_persists_between_instances(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            history = ConversationHistory(paths)
            history.add_text("user", "hello")
            self.assertEqual(
                ConversationHistory(paths).get_history(),
                [{"role": "user", "parts": [{"text": "hello"}]}],
            )
            await history.set_history([{"role": "model", "parts": []}, "junk"])  # type: ignore[list-item]
            self.assertEqual(len(ConversationHistory(paths).get_history()), 1)

    def test_corrupt_history_file_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TasklanePaths(Path(tmp))
            paths.tasklane_dir.mkdir()
            paths.history_file.write_text("[", encoding="utf-8")
            self.assertEqual(ConversationHistory(paths).get_history(), [])

    def test_history_item_from_dict(self) -> None:
        self.assertEqual(HistoryItem.from_dict({"type": "info", "text": "x"}), HistoryItem("info", "x"))
        self.assertIsNone(HistoryItem.from_dict({"type": "info"}))
        self.assertIsNone(HistoryItem.from_dict("info"))
        self.assertEqual(HistoryItem("user", "y").to_dict(), {"type": "user", "text": "y"})


class CheckpointStoreTests(unittest.TestCase):
    def test_write_list_read(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = CheckpointStore(Path(tmp) / "checkpoints")
            store.write("b", {"toolCall": {"name": "x"}})
            store.write("a.json", {})
            (store.directory / "readme.md").write_text("x", encoding="utf-8")
            self.assertEqual(store.list_files(), ["a.json", "b.json"])
            self.assertEqual(store.list_names(), ["a", "b"])
            self.assertEqual(store.read("b.json"), {"toolCall": {"name": "x"}})

    def test_read_rejects_non_object(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            store = CheckpointStore(Path(tmp))
            (store.directory / "list.json").write_text(json.dumps([1]), encoding="utf-8")
            with self.assertRaises(ValueError):
                store.read("list.json")

    def test_checkpoint_file_name(self) -> None:
        self.assertEqual(checkpoint_file_name("x"), "x.json")
        self.assertEqual(checkpoint_file_name("x.json"), "x.json")


@unittest.skipUnless(shutil.which("git"), "git not installed")
class GitSnapshotServiceTests(unittest.TestCase):
    def _git(self, root: Path, *args: str) -> None:
        subprocess.run(["git", *args], cwd=root, check=True, capture_output=True)

    def test_snapshot_and_restore(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            service = GitSnapshotService(root)
            self.assertFalse(service.available())
            self._git(root, "init", "-q")
            self._git(root, "config", "user.email", "dev@example.com")
            self._git(root, "config", "user.name", "Dev")
            self.assertTrue(service.available())

            (root / "a.txt").write_text("before", encoding="utf-8")
            commit = service.create_snapshot("checkpoint")
            self.assertEqual(len(commit), 40)

            (root / "a.txt").write_text("after", encoding="utf-8")
            (root / "new.txt").write_text("stray", encoding="utf-8")
            service.restore_project_from_snapshot(commit)
            self.assertEqual((root / "a.txt").read_text(encoding="utf-8"), "before")
            self.assertFalse((root / "new.txt").exists())

    def test_unknown_commit_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self._git(root, "init", "-q")
            with self.assertRaises(GitSnapshotError):
                GitSnapshotService(root).restore_project_from_snapshot("deadbeef")


if __name__ == "__main__":
    unittest.main()
