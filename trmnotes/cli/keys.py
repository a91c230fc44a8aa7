from __future__ import annotations

from typing import Any, Optional

from ..editing.dispatcher import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_END,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_HOME,
    KEY_LEFT,
    KEY_NEW_NOTE,
    KEY_QUIT,
    KEY_REFRESH,
    KEY_RIGHT,
    KEY_SAVE,
    KEY_TAB,
    KEY_TOGGLE_EXPLORER,
    KEY_UP,
    Key,
)

# prompt_toolkit key names -> abstract keys
KEY_MAP = {
    "c-q": KEY_QUIT,
    "c-c": KEY_QUIT,
    "c-n": KEY_NEW_NOTE,
    "c-s": KEY_SAVE,
    "c-e": KEY_TOGGLE_EXPLORER,
    "c-r": KEY_REFRESH,
    "c-m": KEY_ENTER,
    "c-j": KEY_ENTER,
    "c-i": KEY_TAB,
    "c-h": KEY_BACKSPACE,
    "escape": KEY_ESCAPE,
    "up": KEY_UP,
    "down": KEY_DOWN,
    "left": KEY_LEFT,
    "right": KEY_RIGHT,
    "home": KEY_HOME,
    "end": KEY_END,
}

KEY_HINTS = (
    ("Quit", "Ctrl+Q"),
    ("Save", "Ctrl+S"),
    ("New", "Ctrl+N"),
    ("Toggle Explorer", "Ctrl+E"),
    ("Focus", "Tab"),
)


def translate_key(key: Any, data: str = "") -> Optional[Key]:
    """Map a decoded terminal key press onto an abstract Key.

    ``key`` is a prompt_toolkit ``Keys`` member or a plain character;
    ``data`` is the text the terminal sent for it.
    """
    name = getattr(key, "value", key)
    if not isinstance(name, str):
        return None
    mapped = KEY_MAP.get(name)
    if mapped is not None:
        return Key(mapped)
    text = data or name
    if len(text) == 1 and text.isprintable():
        return Key.of(text)
    return None
