from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

from ..core.session_log import log_debug, log_exception

DEFAULT_QUIET_PERIOD = 2.0

SaveCallback = Callable[[], Awaitable[object]]


class AutosaveScheduler:
    """Debounce buffer activity into single background saves.

    ``notify_activity`` (re)arms a one-shot timer on the running loop. When
    the timer elapses the ``save`` coroutine runs as a task; at most one such
    task exists at a time. A timer that elapses while a save is running sets
    a follow-up flag and the running task saves once more when it finishes.
    """

    def __init__(
        self,
        save: SaveCallback,
        *,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        is_dirty: Optional[Callable[[], bool]] = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        if quiet_period < 0:
            raise ValueError("quiet_period must be >= 0")
        self._save = save
        self.quiet_period = quiet_period
        self._is_dirty = is_dirty
        self._loop = loop
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task | None = None
        self._save_again = False

    @property
    def pending(self) -> bool:
        return self._timer is not None

    @property
    def saving(self) -> bool:
        return self._task is not None and not self._task.done()

    def notify_activity(self) -> None:
        loop = self._get_loop()
        self._cancel_timer()
        self._timer = loop.call_later(self.quiet_period, self._on_timer)

    def cancel(self) -> None:
        self._cancel_timer()
        self._save_again = False

    async def wait_idle(self) -> None:
        task = self._task
        if task is not None and not task.done():
            await asyncio.shield(task)

    async def flush(self) -> bool:
        """Save now, bypassing the quiet period.

        Any pending timer is dropped and an in-flight save is awaited first.
        Returns False when there was nothing to save.
        """
        self.cancel()
        await self.wait_idle()
        if self._is_dirty is not None and not self._is_dirty():
            return False
        log_debug("autosave", "autosave.flush")
        await self._save()
        return True

    def _on_timer(self) -> None:
        self._timer = None
        if self.saving:
            self._save_again = True
            log_debug("autosave", "autosave.deferred")
            return
        self._task = self._get_loop().create_task(self._run())

    async def _run(self) -> None:
        while True:
            self._save_again = False
            if self._is_dirty is None or self._is_dirty():
                log_debug("autosave", "autosave.fired")
                try:
                    await self._save()
                except Exception as exc:
                    # only the failed save is dropped; a deferred one still runs
                    log_exception("autosave", exc)
            if not self._save_again:
                break

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop
