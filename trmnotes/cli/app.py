from __future__ import annotations

import argparse
import asyncio
from pathlib import Path
from typing import Any, Optional

from prompt_toolkit.application import Application
from prompt_toolkit.filters import Condition
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import Layout
from prompt_toolkit.layout.containers import ConditionalContainer, HSplit, VSplit, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.styles import Style
from rich.console import Console

from ..config.manager import ConfigManager
from ..config.paths import TrmnotesPaths
from ..core.session_log import SessionLogger, log_exception, set_active_logger
from ..editing.dispatcher import Key
from ..session import SessionController
from .keys import translate_key
from .render import (
    STYLE_RULES,
    render_editor,
    render_explorer,
    render_status,
    render_title,
)

REFRESH_INTERVAL = 0.5


class TrmnotesApp:
    """Full-screen terminal front end around a SessionController.

    Key presses are queued and a single background task feeds them to the
    controller in arrival order, so slow operations (a flush before switching
    notes) never reorder input.
    """

    def __init__(self, controller: SessionController) -> None:
        self.controller = controller
        self._keys: asyncio.Queue[Key] = asyncio.Queue()
        self.app: Application | None = None

    def post_key(self, key: Key) -> None:
        self._keys.put_nowait(key)

    async def pump_keys(self) -> None:
        while self.controller.running:
            key = await self._keys.get()
            try:
                await self.controller.handle_key(key)
            finally:
                self._keys.task_done()
            if self.app is not None:
                self.app.invalidate()
        if self.app is not None and self.app.is_running:
            self.app.exit()

    def build_application(self, **app_kwargs: Any) -> Application:
        bindings = KeyBindings()

        @bindings.add("<any>")
        def _on_key(event) -> None:  # type: ignore[no-untyped-def]
            pressed = event.key_sequence[0]
            key = translate_key(pressed.key, pressed.data)
            if key is not None:
                self.post_key(key)

        explorer_open = Condition(lambda: self.controller.state.explorer_open)
        explorer = ConditionalContainer(
            VSplit(
                [
                    Window(
                        FormattedTextControl(
                            lambda: render_explorer(self.controller.status())
                        ),
                        width=Dimension(weight=15),
                    ),
                    Window(width=1, char="│"),
                ]
            ),
            filter=explorer_open,
        )
        editor = Window(
            FormattedTextControl(lambda: render_editor(self.controller.status())),
            width=Dimension(weight=85),
            wrap_lines=True,
        )
        root = HSplit(
            [
                Window(
                    FormattedTextControl(lambda: render_title(self.controller.status())),
                    height=1,
                ),
                VSplit([explorer, editor]),
                Window(
                    FormattedTextControl(lambda: render_status(self.controller.status())),
                    height=1,
                    style="class:status",
                ),
            ]
        )
        return Application(
            layout=Layout(root),
            key_bindings=bindings,
            style=Style.from_dict(STYLE_RULES),
            full_screen=True,
            refresh_interval=REFRESH_INTERVAL,
            **app_kwargs,
        )

    async def run(self) -> bool:
        """Run until quit; returns True when every edit reached the disk."""
        await self.controller.start()
        self.app = self.build_application()
        app = self.app
        try:
            await app.run_async(pre_run=lambda: app.create_background_task(self.pump_keys()))
        finally:
            if self.controller.running:
                await self.controller.close()
        return not self.controller.buffer.dirty


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Trmnotes - terminal Markdown notes")
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    parser.add_argument("-d", "--notes-dir", help="Notes directory (default: ./notes)")
    parser.add_argument(
        "-a",
        "--autosave",
        type=float,
        help="Seconds of inactivity before autosave",
    )
    parser.add_argument(
        "--debug",
        nargs="?",
        const="all",
        help="Enable session logging (session, error, warn, info, debug, all)",
    )
    parser.add_argument(
        "--init",
        action="store_true",
        help="Write .trmnotes/trmnotes.json with defaults and exit",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)
    console = Console()
    if args.version:
        from trmnotes import __version__

        console.print(f"trmnotes {__version__}")
        return
    if args.autosave is not None and args.autosave < 0:
        parser.error("--autosave must be >= 0")

    paths = TrmnotesPaths(Path.cwd())
    config = ConfigManager(paths, console=console)
    if args.init:
        created = config.create_config_template()
        console.print(f"[green]Wrote {created}[/green]")
        return

    settings = config.load_settings(
        notes_dir=args.notes_dir,
        autosave_seconds=args.autosave,
        debug=args.debug,
    )
    logger = SessionLogger(paths, settings.debug)
    set_active_logger(logger)
    controller = SessionController.from_settings(settings)
    try:
        clean = asyncio.run(TrmnotesApp(controller).run())
    except KeyboardInterrupt:
        return
    except OSError as exc:
        log_exception("cli", exc)
        raise
    finally:
        logger.close()
        set_active_logger(None)

    if not clean:
        title = controller.state.current.title if controller.state.current else "note"
        console.print(f"[red]Unsaved changes in {title}: {controller.last_error}[/red]")
        if controller.recovery_path is not None:
            console.print(f"[yellow]A copy was written to {controller.recovery_path}[/yellow]")


if __name__ == "__main__":
    main()
