from dataclasses import dataclass
from pathlib import Path


@dataclass
class TasklanePaths:
    """Centralizes filesystem paths for a Tasklane workspace."""

    root: Path

    @property
    def tasklane_dir(self) -> Path:
        return self.root / ".tasklane"

    @property
    def config_file(self) -> Path:
        return self.tasklane_dir / "tasklane.json"

    @property
    def history_file(self) -> Path:
        return self.tasklane_dir / "history.json"

    @property
    def logs_dir(self) -> Path:
        return self.tasklane_dir / "logs"

    @property
    def project_temp_dir(self) -> Path:
        return self.tasklane_dir / "tmp"

    @property
    def checkpoints_dir(self) -> Path:
        return self.project_temp_dir / "checkpoints"

    @property
    def global_dir(self) -> Path:
        return Path.home() / ".tasklane"

    @property
    def global_config_file(self) -> Path:
        return self.global_dir / "tasklane.json"
