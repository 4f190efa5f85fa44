from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from .session_log import log_info


class GitSnapshotError(RuntimeError):
    pass


class GitSnapshotService:
    """Restores the workspace to commits recorded before tool calls."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def available(self) -> bool:
        return shutil.which("git") is not None and (self.root / ".git").exists()

    def create_snapshot(self, message: str) -> str:
        self._git("add", "-A")
        self._git("commit", "--allow-empty", "--no-verify", "-m", message)
        return self._git("rev-parse", "HEAD").strip()

    def restore_project_from_snapshot(self, commit_hash: str) -> None:
        self._git("restore", "--source", commit_hash, ".")
        self._git("clean", "-f", "-d")
        log_info("git", "snapshot.restored", {"commit": commit_hash})

    def _git(self, *args: str) -> str:
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self.root,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
        except FileNotFoundError as exc:
            raise GitSnapshotError("git executable not found") from exc
        except subprocess.CalledProcessError as exc:
            detail = exc.stderr.decode("utf-8", errors="replace").strip()
            raise GitSnapshotError(f"git {args[0]} failed: {detail}") from exc
        return proc.stdout.decode("utf-8", errors="replace")
