from __future__ import annotations

import os
import uuid
from contextlib import suppress
from datetime import datetime
from pathlib import Path


def read_note_text(path: Path) -> str:
    """Read a note with its line endings left exactly as stored."""
    with open(Path(path), encoding="utf-8", newline="") as handle:
        return handle.read()


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Write through a temp file in the same directory, then replace.

    The parent directory is not created: a note whose directory vanished
    must fail to save instead of silently resurrecting the tree.
    """
    path = Path(path)
    tmp_path = path.parent / f".{path.name}.tmp-{uuid.uuid4().hex}"
    try:
        with open(tmp_path, "w", encoding=encoding, newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        tmp_path.replace(path)
    finally:
        with suppress(OSError):
            if tmp_path.exists():
                tmp_path.unlink()


def create_exclusive(path: Path, text: str = "", encoding: str = "utf-8") -> None:
    """Create ``path`` with ``text``; raise FileExistsError if it is already there."""
    with open(Path(path), "x", encoding=encoding, newline="") as handle:
        handle.write(text)


def write_recovery_copy(recovery_dir: Path, note_path: Path, text: str) -> Path:
    """Emergency copy for text whose note could not be saved.

    Written as ``<stem>.recovery.<timestamp>.md`` under ``recovery_dir``.
    """
    recovery_dir = Path(recovery_dir)
    recovery_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(note_path).stem or "Untitled"
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    target = recovery_dir / f"{stem}.recovery.{ts}.md"
    atomic_write_text(target, text)
    return target
