from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from ..errors import NoteLoadError, NoteSaveError, describe_os_error
from ..notes.catalog import Note
from ..notes.io import atomic_write_text, read_note_text

CURSOR_DIRECTIONS = ("left", "right", "up", "down", "home", "end")


class EditBuffer:
    """In-memory text of the open note with cursor and dirty tracking.

    ``revision`` increases on every mutation. A save records the revision it
    wrote; dirty clears only when that revision is still the latest one, so
    edits made while a write is running keep the buffer dirty.

    Files whose line breaks are all CRLF are edited with plain "\n" and
    written back with CRLF; ``newline`` records which style applies.
    """

    def __init__(
        self,
        text: str = "",
        *,
        on_activity: Optional[Callable[[], None]] = None,
    ) -> None:
        self._text = text
        self._cursor = 0
        self._revision = 0
        self._saved_revision = 0
        self.newline = "\n"
        self.last_saved_at: datetime | None = None
        self.on_activity = on_activity

    @property
    def content(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def dirty(self) -> bool:
        return self._revision != self._saved_revision

    def load(self, note: Note) -> str:
        try:
            text = read_note_text(note.path)
        except (OSError, UnicodeDecodeError) as exc:
            reason = describe_os_error(exc) if isinstance(exc, OSError) else str(exc)
            raise NoteLoadError(
                f"Could not open {note.file_name}: {reason}", path=note.path
            ) from exc
        newline = "\n"
        breaks = text.count("\n")
        if breaks and text.count("\r\n") == breaks:
            newline = "\r\n"
            text = text.replace(newline, "\n")
        self._text = text
        self.newline = newline
        self._cursor = 0
        self._saved_revision = self._revision
        return text

    def insert(self, text: str) -> None:
        if not text:
            return
        pos = self._cursor
        self._text = self._text[:pos] + text + self._text[pos:]
        self._cursor = pos + len(text)
        self._touch()

    def delete_backward(self) -> None:
        pos = self._cursor
        if pos == 0:
            return
        self._text = self._text[: pos - 1] + self._text[pos:]
        self._cursor = pos - 1
        self._touch()

    def move_cursor(self, direction: str) -> None:
        if direction not in CURSOR_DIRECTIONS:
            raise ValueError(f"Unknown cursor direction: {direction}")
        text = self._text
        pos = self._cursor
        line_start = text.rfind("\n", 0, pos) + 1
        line_end = text.find("\n", pos)
        if line_end == -1:
            line_end = len(text)
        column = pos - line_start

        if direction == "left":
            pos = max(0, pos - 1)
        elif direction == "right":
            pos = min(len(text), pos + 1)
        elif direction == "home":
            pos = line_start
        elif direction == "end":
            pos = line_end
        elif direction == "up":
            if line_start > 0:
                prev_start = text.rfind("\n", 0, line_start - 1) + 1
                pos = min(prev_start + column, line_start - 1)
        elif direction == "down":
            if line_end < len(text):
                next_start = line_end + 1
                next_end = text.find("\n", next_start)
                if next_end == -1:
                    next_end = len(text)
                pos = min(next_start + column, next_end)
        self._cursor = pos

    def line_and_column(self) -> tuple[int, int]:
        before = self._text[: self._cursor]
        line = before.count("\n")
        column = self._cursor - (before.rfind("\n") + 1)
        return line, column

    def snapshot(self) -> tuple[str, int]:
        return self._text, self._revision

    def mark_saved(self, revision: int, *, when: datetime | None = None) -> None:
        if revision > self._saved_revision:
            self._saved_revision = min(revision, self._revision)
        self.last_saved_at = when or datetime.now()

    def save(self, note: Note) -> bool:
        text, revision = self.snapshot()
        write_note(note, text, newline=self.newline)
        self.mark_saved(revision)
        return True

    def _touch(self) -> None:
        self._revision += 1
        if self.on_activity is not None:
            self.on_activity()


def write_note(note: Note, text: str, *, newline: str = "\n") -> None:
    if newline != "\n":
        text = text.replace("\n", newline)
    try:
        atomic_write_text(note.path, text)
    except OSError as exc:
        raise NoteSaveError(
            f"Could not save {note.file_name}: {describe_os_error(exc)}",
            path=note.path,
        ) from exc
