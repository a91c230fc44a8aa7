from __future__ import annotations

from pathlib import Path


class TrmnotesError(Exception):
    """Base class for recoverable note-session errors."""

    kind = "error"

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class DirectoryScanError(TrmnotesError):
    kind = "scan"


class NoteLoadError(TrmnotesError):
    kind = "load"


class NoteSaveError(TrmnotesError):
    kind = "save"


class NoteCreateError(TrmnotesError):
    kind = "create"


def describe_os_error(exc: OSError) -> str:
    return exc.strerror or str(exc) or type(exc).__name__
