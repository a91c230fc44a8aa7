from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..notes.catalog import Note


class Mode(str, Enum):
    NORMAL = "normal"
    NOTE_CREATE = "note_create"


class Focus(str, Enum):
    EXPLORER = "explorer"
    EDITOR = "editor"


# Abstract key names; the terminal layer maps concrete key presses onto these.
KEY_CHAR = "char"
KEY_ENTER = "enter"
KEY_BACKSPACE = "backspace"
KEY_ESCAPE = "escape"
KEY_TAB = "tab"
KEY_UP = "up"
KEY_DOWN = "down"
KEY_LEFT = "left"
KEY_RIGHT = "right"
KEY_HOME = "home"
KEY_END = "end"
KEY_NEW_NOTE = "new_note"
KEY_SAVE = "save"
KEY_TOGGLE_EXPLORER = "toggle_explorer"
KEY_REFRESH = "refresh"
KEY_QUIT = "quit"

CURSOR_KEYS = {KEY_LEFT, KEY_RIGHT, KEY_UP, KEY_DOWN, KEY_HOME, KEY_END}


@dataclass(frozen=True)
class Key:
    name: str
    char: str = ""

    @classmethod
    def of(cls, char: str) -> "Key":
        return cls(KEY_CHAR, char)

    @property
    def printable(self) -> bool:
        return self.name == KEY_CHAR and bool(self.char) and self.char.isprintable()


@dataclass(frozen=True)
class Command:
    """Effect requested by the dispatcher and applied by the session."""

    action: str
    value: str = ""
    delta: int = 0


@dataclass
class SessionState:
    current: Optional[Note] = None
    mode: Mode = Mode.NORMAL
    pending_name: str = ""
    selected: int = 0
    focus: Focus = Focus.EDITOR
    explorer_open: bool = True
    message: str = ""
    running: bool = True


class InputDispatcher:
    """Mode-based key router.

    ``dispatch`` applies the pure state changes a key implies (mode switches,
    pending-name edits, focus) and returns the command the session must carry
    out against the catalog or the buffer, if any.
    """

    def dispatch(self, state: SessionState, key: Key) -> Optional[Command]:
        if state.mode is Mode.NOTE_CREATE:
            return self._dispatch_note_create(state, key)
        return self._dispatch_normal(state, key)

    def _dispatch_normal(self, state: SessionState, key: Key) -> Optional[Command]:
        name = key.name
        if name == KEY_QUIT:
            return Command("quit")
        if name == KEY_NEW_NOTE:
            state.mode = Mode.NOTE_CREATE
            state.pending_name = ""
            return None
        if name == KEY_SAVE:
            return Command("save")
        if name == KEY_REFRESH:
            return Command("refresh")
        if name == KEY_TOGGLE_EXPLORER:
            state.explorer_open = not state.explorer_open
            if not state.explorer_open:
                state.focus = Focus.EDITOR
            return None
        if name == KEY_TAB:
            if state.focus is Focus.EDITOR and state.explorer_open:
                state.focus = Focus.EXPLORER
            else:
                state.focus = Focus.EDITOR
            return None
        if state.focus is Focus.EXPLORER:
            return self._dispatch_explorer(key)
        return self._dispatch_editor(key)

    def _dispatch_explorer(self, key: Key) -> Optional[Command]:
        if key.name == KEY_UP:
            return Command("select", delta=-1)
        if key.name == KEY_DOWN:
            return Command("select", delta=1)
        if key.name == KEY_ENTER:
            return Command("open")
        return None

    def _dispatch_editor(self, key: Key) -> Optional[Command]:
        if key.name in CURSOR_KEYS:
            return Command("move", key.name)
        if key.name == KEY_BACKSPACE:
            return Command("delete")
        if key.name == KEY_ENTER:
            return Command("insert", "\n")
        if key.printable:
            return Command("insert", key.char)
        return None

    def _dispatch_note_create(self, state: SessionState, key: Key) -> Optional[Command]:
        name = key.name
        if name == KEY_QUIT:
            return Command("quit")
        if name == KEY_ESCAPE:
            state.pending_name = ""
            state.mode = Mode.NORMAL
            return None
        if name == KEY_BACKSPACE:
            state.pending_name = state.pending_name[:-1]
            return None
        if name == KEY_ENTER:
            if not state.pending_name:
                return None
            return Command("create", state.pending_name)
        if key.printable:
            state.pending_name += key.char
        return None
