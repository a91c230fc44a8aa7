from dataclasses import dataclass
from pathlib import Path


@dataclass
class TrmnotesPaths:
    """Centralizes filesystem paths for a trmnotes workspace."""

    root: Path

    @property
    def trmnotes_dir(self) -> Path:
        return self.root / ".trmnotes"

    @property
    def config_file(self) -> Path:
        return self.trmnotes_dir / "trmnotes.json"

    @property
    def logs_dir(self) -> Path:
        return self.trmnotes_dir / "logs"

    @property
    def default_notes_dir(self) -> Path:
        return self.root / "notes"

    @property
    def global_dir(self) -> Path:
        return Path.home() / ".trmnotes"

    @property
    def global_config_file(self) -> Path:
        return self.global_dir / "trmnotes.json"

    @property
    def recovery_dir(self) -> Path:
        return self.global_dir / "recovery"
