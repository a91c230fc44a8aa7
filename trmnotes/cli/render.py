from __future__ import annotations

from ..editing.dispatcher import Focus, Mode
from ..session import StatusSnapshot
from .keys import KEY_HINTS

Fragments = list[tuple[str, str]]

STYLE_RULES = {
    "title": "bold #5f87ff",
    "hint.label": "bold",
    "hint.key": "bold #ff5f5f",
    "explorer": "",
    "explorer.selected": "reverse",
    "explorer.current": "bold",
    "explorer.empty": "italic #888888",
    "explorer.focused": "bold #5f87ff",
    "editor.cursor": "reverse",
    "editor.empty": "italic #888888",
    "status": "reverse",
    "status.dirty": "reverse bold #ffaf00",
    "status.error": "reverse bold #ff5f5f",
    "status.prompt": "reverse bold #5fff87",
}


def render_title(status: StatusSnapshot) -> Fragments:
    fragments: Fragments = [("class:title", " Trmnotes ")]
    for label, key in KEY_HINTS:
        fragments.append(("class:hint.label", f" {label} "))
        fragments.append(("class:hint.key", f"<{key}>"))
    return fragments


def render_explorer(status: StatusSnapshot) -> Fragments:
    header_style = "class:explorer.focused" if status.focus is Focus.EXPLORER else "class:explorer"
    fragments: Fragments = [(header_style, " Files\n")]
    if not status.notes:
        fragments.append(("class:explorer.empty", " (no notes)\n"))
        return fragments
    for idx, title in enumerate(status.notes):
        style = "class:explorer"
        if title == status.current_title:
            style = "class:explorer.current"
        if idx == status.selected and status.focus is Focus.EXPLORER:
            style = f"{style} class:explorer.selected"
        marker = "*" if title == status.current_title and status.dirty else " "
        fragments.append((style, f"{marker}{title}\n"))
    return fragments


def render_editor(status: StatusSnapshot) -> Fragments:
    if status.current_title is None:
        return [("class:editor.empty", "No note open. Press Ctrl+N to create one.")]
    text = status.text
    pos = status.cursor
    before, after = text[:pos], text[pos:]
    if status.focus is not Focus.EDITOR or status.mode is not Mode.NORMAL:
        return [("", text)]
    if not after or after[0] == "\n":
        return [("", before), ("class:editor.cursor", " "), ("", after)]
    return [("", before), ("class:editor.cursor", after[0]), ("", after[1:])]


def render_status(status: StatusSnapshot) -> Fragments:
    if status.mode is Mode.NOTE_CREATE:
        fragments: Fragments = [
            ("class:status.prompt", f" New note: {status.pending_name}_ "),
            ("class:status", " Enter create  Esc cancel "),
        ]
        if status.message:
            fragments.append(("class:status.error", f" {status.message} "))
        return fragments

    fragments = [("class:status", f" {status.mode.value.upper()} ")]
    if status.current_title is not None:
        fragments.append(("class:status", f" {status.current_title} "))
        fragments.append(
            ("class:status", f" Ln {status.cursor_line + 1}, Col {status.cursor_column + 1} ")
        )
        if status.dirty:
            fragments.append(("class:status.dirty", " ● unsaved "))
        elif status.last_saved_at is not None:
            fragments.append(
                ("class:status", f" saved {status.last_saved_at.strftime('%H:%M:%S')} ")
            )
    if status.last_save_ok is False:
        fragments.append(("class:status.error", " save failed "))
    if status.message:
        fragments.append(("class:status", f" {status.message} "))
    return fragments
