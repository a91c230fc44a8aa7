import unittest

from trmnotes.editing.dispatcher import (
    KEY_BACKSPACE,
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_LEFT,
    KEY_NEW_NOTE,
    KEY_QUIT,
    KEY_SAVE,
    KEY_TAB,
    KEY_TOGGLE_EXPLORER,
    KEY_UP,
    Command,
    Focus,
    InputDispatcher,
    Key,
    Mode,
    SessionState,
)


def _type(dispatcher: InputDispatcher, state: SessionState, text: str) -> list:
    return [dispatcher.dispatch(state, Key.of(ch)) for ch in text]


class NormalModeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.dispatcher = InputDispatcher()
        self.state = SessionState()

    def test_editor_keys_become_buffer_commands(self) -> None:
        self.assertEqual(self.dispatcher.dispatch(self.state, Key.of("a")), Command("insert", "a"))
        self.assertEqual(self.dispatcher.dispatch(self.state, Key(KEY_ENTER)), Command("insert", "\n"))
        self.assertEqual(self.dispatcher.dispatch(self.state, Key(KEY_BACKSPACE)), Command("delete"))
        self.assertEqual(self.dispatcher.dispatch(self.state, Key(KEY_LEFT)), Command("move", "left"))
        self.assertIsNone(self.dispatcher.dispatch(self.state, Key(KEY_ESCAPE)))

    def test_explorer_focus_routes_navigation(self) -> None:
        self.dispatcher.dispatch(self.state, Key(KEY_TAB))
        self.assertIs(self.state.focus, Focus.EXPLORER)

        up = self.dispatcher.dispatch(self.state, Key(KEY_UP))
        down = self.dispatcher.dispatch(self.state, Key(KEY_DOWN))
        self.assertEqual(up, Command("select", delta=-1))
        self.assertEqual(down, Command("select", delta=1))
        self.assertEqual(self.dispatcher.dispatch(self.state, Key(KEY_ENTER)), Command("open"))
        self.assertIsNone(self.dispatcher.dispatch(self.state, Key.of("x")))

        self.dispatcher.dispatch(self.state, Key(KEY_TAB))
        self.assertIs(self.state.focus, Focus.EDITOR)

    def test_hidden_explorer_keeps_focus_on_editor(self) -> None:
        self.dispatcher.dispatch(self.state, Key(KEY_TAB))
        self.dispatcher.dispatch(self.state, Key(KEY_TOGGLE_EXPLORER))
        self.assertFalse(self.state.explorer_open)
        self.assertIs(self.state.focus, Focus.EDITOR)
        self.dispatcher.dispatch(self.state, Key(KEY_TAB))
        self.assertIs(self.state.focus, Focus.EDITOR)

    def test_global_commands(self) -> None:
        self.assertEqual(self.dispatcher.dispatch(self.state, Key(KEY_SAVE)), Command("save"))
        self.assertEqual(self.dispatcher.dispatch(self.state, Key(KEY_QUIT)), Command("quit"))

    def test_new_note_key_enters_note_create(self) -> None:
        self.state.pending_name = "stale"
        self.assertIsNone(self.dispatcher.dispatch(self.state, Key(KEY_NEW_NOTE)))
        self.assertIs(self.state.mode, Mode.NOTE_CREATE)
        self.assertEqual(self.state.pending_name, "")


class NoteCreateModeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.dispatcher = InputDispatcher()
        self.state = SessionState()
        self.dispatcher.dispatch(self.state, Key(KEY_NEW_NOTE))

    def test_typing_backspace_and_escape(self) -> None:
        commands = _type(self.dispatcher, self.state, "todo")
        self.assertEqual(commands, [None] * 4)
        self.dispatcher.dispatch(self.state, Key(KEY_BACKSPACE))
        self.assertEqual(self.state.pending_name, "tod")

        self.dispatcher.dispatch(self.state, Key(KEY_ESCAPE))
        self.assertEqual(self.state.pending_name, "")
        self.assertIs(self.state.mode, Mode.NORMAL)

    def test_backspace_on_empty_name_is_noop(self) -> None:
        self.dispatcher.dispatch(self.state, Key(KEY_BACKSPACE))
        self.assertEqual(self.state.pending_name, "")
        self.assertIs(self.state.mode, Mode.NOTE_CREATE)

    def test_enter_with_empty_name_does_nothing(self) -> None:
        self.assertIsNone(self.dispatcher.dispatch(self.state, Key(KEY_ENTER)))
        self.assertIs(self.state.mode, Mode.NOTE_CREATE)

    def test_enter_with_name_requests_create_without_leaving_mode(self) -> None:
        _type(self.dispatcher, self.state, "plan")
        command = self.dispatcher.dispatch(self.state, Key(KEY_ENTER))
        self.assertEqual(command, Command("create", "plan"))
        self.assertIs(self.state.mode, Mode.NOTE_CREATE)
        self.assertEqual(self.state.pending_name, "plan")

    def test_no_key_reaches_buffer_or_catalog(self) -> None:
        self.state.focus = Focus.EXPLORER
        keys = [
            Key(KEY_UP),
            Key(KEY_DOWN),
            Key(KEY_LEFT),
            Key(KEY_TAB),
            Key(KEY_SAVE),
            Key(KEY_TOGGLE_EXPLORER),
            Key(KEY_NEW_NOTE),
            Key.of("\x07"),
            Key.of("x"),
        ]
        for key in keys:
            with self.subTest(key=key):
                self.assertIsNone(self.dispatcher.dispatch(self.state, key))
        self.assertIs(self.state.mode, Mode.NOTE_CREATE)
        self.assertIs(self.state.focus, Focus.EXPLORER)
        self.assertTrue(self.state.explorer_open)
        self.assertEqual(self.state.pending_name, "x")

    def test_quit_still_works(self) -> None:
        self.assertEqual(self.dispatcher.dispatch(self.state, Key(KEY_QUIT)), Command("quit"))


if __name__ == "__main__":
    unittest.main()
