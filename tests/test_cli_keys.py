import unittest
from datetime import datetime

from prompt_toolkit.keys import Keys

from trmnotes.cli.keys import translate_key
from trmnotes.cli.render import render_editor, render_explorer, render_status, render_title
from trmnotes.editing.dispatcher import (
    KEY_BACKSPACE,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_NEW_NOTE,
    KEY_QUIT,
    KEY_TAB,
    KEY_UP,
    Focus,
    Key,
    Mode,
)
from trmnotes.session import StatusSnapshot


def _status(**overrides) -> StatusSnapshot:
    values = dict(
        mode=Mode.NORMAL,
        focus=Focus.EDITOR,
        explorer_open=True,
        notes=("alpha", "beta"),
        selected=0,
        current_title="alpha",
        text="hi\nthere",
        cursor=2,
        cursor_line=0,
        cursor_column=2,
        dirty=False,
        pending_name="",
        last_save_ok=None,
        last_saved_at=None,
        message="",
    )
    values.update(overrides)
    return StatusSnapshot(**values)


def _text(fragments) -> str:
    return "".join(text for _style, text in fragments)


class TranslateKeyTests(unittest.TestCase):
    def test_control_and_named_keys(self) -> None:
        self.assertEqual(translate_key(Keys.ControlQ), Key(KEY_QUIT))
        self.assertEqual(translate_key(Keys.ControlC), Key(KEY_QUIT))
        self.assertEqual(translate_key(Keys.ControlN), Key(KEY_NEW_NOTE))
        self.assertEqual(translate_key(Keys.Enter, "\r"), Key(KEY_ENTER))
        self.assertEqual(translate_key(Keys.Tab, "\t"), Key(KEY_TAB))
        self.assertEqual(translate_key(Keys.Backspace, "\x7f"), Key(KEY_BACKSPACE))
        self.assertEqual(translate_key(Keys.Escape, "\x1b"), Key(KEY_ESCAPE))
        self.assertEqual(translate_key(Keys.Up), Key(KEY_UP))

    def test_printable_characters(self) -> None:
        self.assertEqual(translate_key("a", "a"), Key.of("a"))
        self.assertEqual(translate_key("é", "é"), Key.of("é"))
        self.assertEqual(translate_key(" ", " "), Key.of(" "))

    def test_unmapped_keys_are_dropped(self) -> None:
        self.assertIsNone(translate_key(Keys.F5))
        self.assertIsNone(translate_key(Keys.ControlT, "\x14"))
        self.assertIsNone(translate_key(None))


class RenderTests(unittest.TestCase):
    def test_title_carries_hints(self) -> None:
        text = _text(render_title(_status()))
        self.assertIn("Trmnotes", text)
        self.assertIn("<Ctrl+Q>", text)
        self.assertIn("<Ctrl+E>", text)

    def test_explorer_marks_dirty_current_note(self) -> None:
        text = _text(render_explorer(_status(dirty=True)))
        self.assertIn("*alpha", text)
        self.assertIn(" beta", text)

    def test_explorer_empty(self) -> None:
        self.assertIn("(no notes)", _text(render_explorer(_status(notes=()))))

    def test_editor_shows_cursor_cell(self) -> None:
        fragments = render_editor(_status())
        self.assertEqual(_text(fragments), "hi \nthere")
        self.assertIn(("class:editor.cursor", " "), fragments)

        fragments = render_editor(_status(cursor=0))
        self.assertIn(("class:editor.cursor", "h"), fragments)

    def test_editor_without_note(self) -> None:
        self.assertIn("Ctrl+N", _text(render_editor(_status(current_title=None))))

    def test_status_bar_modes(self) -> None:
        saved = _text(render_status(_status(last_saved_at=datetime(2024, 1, 1, 9, 30, 0))))
        self.assertIn("saved 09:30:00", saved)
        self.assertIn("unsaved", _text(render_status(_status(dirty=True))))
        self.assertIn("save failed", _text(render_status(_status(last_save_ok=False))))

        prompt = _text(render_status(_status(mode=Mode.NOTE_CREATE, pending_name="tod")))
        self.assertIn("New note: tod_", prompt)


if __name__ == "__main__":
    unittest.main()
