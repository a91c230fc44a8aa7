from __future__ import annotations

import asyncio
from contextlib import suppress
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config.manager import TrmnotesSettings
from .core.session_log import log_error, log_event, log_exception, log_info, log_warn
from .editing.autosave import DEFAULT_QUIET_PERIOD, AutosaveScheduler
from .editing.buffer import EditBuffer, write_note
from .editing.dispatcher import (
    Command,
    Focus,
    InputDispatcher,
    Key,
    Mode,
    SessionState,
)
from .errors import NoteCreateError, NoteSaveError, TrmnotesError
from .notes.catalog import DEFAULT_NOTE_EXTENSION, Note, NoteCatalog
from .notes.io import write_recovery_copy


@dataclass(frozen=True)
class StatusSnapshot:
    mode: Mode
    focus: Focus
    explorer_open: bool
    notes: tuple[str, ...]
    selected: int
    current_title: Optional[str]
    text: str
    cursor: int
    cursor_line: int
    cursor_column: int
    dirty: bool
    pending_name: str
    last_save_ok: Optional[bool]
    last_saved_at: Optional[datetime]
    message: str


class SessionController:
    """Owns the editing session: catalog, current buffer, autosave and mode.

    Every mutation of the buffer goes through this object. Keys must be fed
    to ``handle_key`` one at a time and awaited in order; the terminal front
    end queues them for that reason.
    """

    def __init__(
        self,
        notes_dir: Path,
        *,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        extension: str = DEFAULT_NOTE_EXTENSION,
        template: str = "",
        explorer_open: bool = True,
        recovery_dir: Optional[Path] = None,
        dispatcher: Optional[InputDispatcher] = None,
    ) -> None:
        self.notes_dir = Path(notes_dir)
        self.template = template
        self.recovery_dir = Path(recovery_dir) if recovery_dir is not None else None
        self.recovery_path: Optional[Path] = None
        self.catalog = NoteCatalog(self.notes_dir, extension=extension)
        self.state = SessionState(explorer_open=explorer_open)
        self.dispatcher = dispatcher or InputDispatcher()
        self.buffer = EditBuffer(on_activity=self._on_activity)
        self.autosave = AutosaveScheduler(
            self._write_back,
            quiet_period=quiet_period,
            is_dirty=lambda: self.buffer.dirty,
        )
        self.last_save_ok: Optional[bool] = None
        self.last_saved_at: Optional[datetime] = None
        self.last_error: Optional[TrmnotesError] = None
        self.save_count = 0

    @classmethod
    def from_settings(cls, settings: TrmnotesSettings) -> "SessionController":
        return cls(
            settings.notes_dir,
            quiet_period=settings.autosave_seconds,
            extension=settings.note_extension,
            template=settings.note_template,
            explorer_open=settings.explorer_open,
            recovery_dir=settings.recovery_dir,
        )

    @property
    def running(self) -> bool:
        return self.state.running

    async def start(self) -> None:
        with suppress(OSError):
            self.notes_dir.mkdir(parents=True, exist_ok=True)
        log_event("session", "session.start", {"notes_dir": str(self.notes_dir)})
        if await self.refresh() and len(self.catalog):
            await self.open_note(self.catalog[0])
        if self.state.current is None and self.state.explorer_open:
            self.state.focus = Focus.EXPLORER

    async def handle_key(self, key: Key) -> None:
        if not self.state.running:
            return
        command = self.dispatcher.dispatch(self.state, key)
        if command is not None:
            await self._apply(command)

    async def _apply(self, command: Command) -> None:
        action = command.action
        if action == "quit":
            await self.close()
        elif action == "save":
            await self.save_now()
        elif action == "refresh":
            await self.refresh()
        elif action == "select":
            self._move_selection(command.delta)
        elif action == "open":
            if len(self.catalog):
                await self.open_note(self.catalog[self.state.selected])
        elif action == "create":
            await self.create_note(command.value)
        elif action in {"insert", "delete", "move"}:
            self._edit(command)

    def _edit(self, command: Command) -> None:
        if self.state.current is None:
            self.state.message = "No note open. Press Ctrl+N to create one."
            return
        if command.action == "insert":
            self.buffer.insert(command.value)
        elif command.action == "delete":
            self.buffer.delete_backward()
        else:
            self.buffer.move_cursor(command.value)

    def _move_selection(self, delta: int) -> None:
        count = len(self.catalog)
        if not count:
            self.state.selected = 0
            return
        self.state.selected = max(0, min(count - 1, self.state.selected + delta))

    def _on_activity(self) -> None:
        self.autosave.notify_activity()

    async def refresh(self) -> bool:
        """Rescan the notes directory; on failure the old listing stays."""
        try:
            await asyncio.to_thread(self.catalog.refresh)
        except TrmnotesError as exc:
            self._report(exc)
            return False
        current = self.state.current
        index = self.catalog.index_of(current.path) if current is not None else None
        if index is not None:
            self.state.selected = index
        else:
            self._move_selection(0)
        return True

    async def open_note(self, note: Note) -> bool:
        """Flush the outgoing buffer, then load ``note`` into a fresh one.

        If the outgoing buffer cannot be saved the switch is refused so that
        unsaved text is never dropped.
        """
        if self.state.current is not None and self.state.current.path == note.path:
            self.state.focus = Focus.EDITOR
            return True
        if not await self._flush_outgoing():
            return False

        incoming = EditBuffer(on_activity=self._on_activity)
        try:
            await asyncio.to_thread(incoming.load, note)
        except TrmnotesError as exc:
            self._report(exc)
            return False
        self.buffer = incoming
        self.state.current = note
        self.state.focus = Focus.EDITOR
        index = self.catalog.index_of(note.path)
        if index is not None:
            self.state.selected = index
        self.state.message = f"Opened {note.title}"
        log_event("session", "note.open", {"path": str(note.path)})
        return True

    async def create_note(self, name: str) -> Optional[Note]:
        """Create a note from the pending name and select it.

        On failure the session stays in note-creation mode with the name kept.
        """
        if not name:
            return None
        if not await self._flush_outgoing():
            return None
        try:
            note = await asyncio.to_thread(
                self.catalog.create, name, template=self.template
            )
        except NoteCreateError as exc:
            self._report(exc)
            return None
        log_info("session", "note.created", {"path": str(note.path)})
        self.state.mode = Mode.NORMAL
        self.state.pending_name = ""
        await self.refresh()
        await self.open_note(note)
        return note

    async def _flush_outgoing(self) -> bool:
        """Save the open note before leaving it; False if text would be lost."""
        await self.autosave.flush()
        if self.buffer.dirty and self.state.current is not None:
            self.state.message = f"{self.last_error} Staying on {self.state.current.title}."
            return False
        return True

    async def save_now(self) -> bool:
        if self.state.current is None:
            return False
        saved = await self.autosave.flush()
        if not saved:
            self.state.message = "Nothing to save."
        return saved and self.last_save_ok is True

    async def close(self) -> bool:
        """Final flush; returns True when nothing unsaved is left behind.

        When the note itself cannot be written, the text is copied into the
        recovery directory (if one is configured) before the session ends.
        """
        await self.autosave.flush()
        self.state.running = False
        clean = not self.buffer.dirty
        if not clean and self.state.current is not None and self.recovery_dir is not None:
            try:
                self.recovery_path = await asyncio.to_thread(
                    write_recovery_copy,
                    self.recovery_dir,
                    self.state.current.path,
                    self.buffer.content,
                )
            except OSError as exc:
                log_exception("session", exc)
            else:
                log_warn("session", "note.recovered", {"path": str(self.recovery_path)})
        log_event("session", "session.end", {"clean": clean})
        return clean

    async def _write_back(self) -> bool:
        note = self.state.current
        if note is None:
            return False
        buffer = self.buffer
        text, revision = buffer.snapshot()
        try:
            await asyncio.to_thread(write_note, note, text, newline=buffer.newline)
        except NoteSaveError as exc:
            self.last_save_ok = False
            self._report(exc)
            return False
        buffer.mark_saved(revision)
        self.last_save_ok = True
        self.last_saved_at = buffer.last_saved_at
        self.save_count += 1
        log_info("autosave", "note.saved", {"path": str(note.path), "chars": len(text)})
        return True

    def _report(self, exc: TrmnotesError) -> None:
        self.last_error = exc
        self.state.message = str(exc)
        log_error(
            "session",
            f"{exc.kind}.failed",
            {"message": str(exc), "path": str(exc.path) if exc.path else None},
        )

    def status(self) -> StatusSnapshot:
        line, column = self.buffer.line_and_column()
        current = self.state.current
        return StatusSnapshot(
            mode=self.state.mode,
            focus=self.state.focus,
            explorer_open=self.state.explorer_open,
            notes=tuple(note.title for note in self.catalog),
            selected=self.state.selected,
            current_title=current.title if current is not None else None,
            text=self.buffer.content,
            cursor=self.buffer.cursor,
            cursor_line=line,
            cursor_column=column,
            dirty=self.buffer.dirty,
            pending_name=self.state.pending_name,
            last_save_ok=self.last_save_ok,
            last_saved_at=self.last_saved_at,
            message=self.state.message,
        )
