import asyncio
import tempfile
import time
import unittest
from pathlib import Path

from trmnotes.config.paths import TrmnotesPaths
from trmnotes.core.session_log import SessionLogger, set_active_logger
from trmnotes.editing.autosave import AutosaveScheduler

QUIET = 0.05


class Recorder:
    def __init__(self, *, delay: float = 0.0, fail: bool = False) -> None:
        self.delay = delay
        self.fail = fail
        self.calls: list[float] = []
        self.active = 0
        self.max_active = 0
        self.dirty = True

    async def save(self) -> bool:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        self.calls.append(time.monotonic())
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise OSError("disk full")
            self.dirty = False
            return True
        finally:
            self.active -= 1


class AutosaveSchedulerTests(unittest.IsolatedAsyncioTestCase):
    async def test_burst_of_activity_saves_once_after_last_edit(self) -> None:
        recorder = Recorder()
        scheduler = AutosaveScheduler(recorder.save, quiet_period=QUIET)

        last_edit = 0.0
        for _ in range(5):
            scheduler.notify_activity()
            last_edit = time.monotonic()
            await asyncio.sleep(QUIET / 5)
        await asyncio.sleep(QUIET * 3)

        self.assertEqual(len(recorder.calls), 1)
        self.assertGreaterEqual(recorder.calls[0] - last_edit, QUIET * 0.9)
        self.assertFalse(scheduler.pending)

    async def test_goes_idle_until_next_activity(self) -> None:
        recorder = Recorder()
        scheduler = AutosaveScheduler(recorder.save, quiet_period=QUIET)
        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 3)
        await asyncio.sleep(QUIET * 3)
        self.assertEqual(len(recorder.calls), 1)

        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 3)
        self.assertEqual(len(recorder.calls), 2)

    async def test_at_most_one_save_in_flight(self) -> None:
        recorder = Recorder(delay=QUIET * 3)
        scheduler = AutosaveScheduler(recorder.save, quiet_period=QUIET)

        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 1.5)
        self.assertTrue(scheduler.saving)
        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 10)

        self.assertEqual(recorder.max_active, 1)
        self.assertEqual(len(recorder.calls), 2)
        self.assertGreaterEqual(recorder.calls[1] - recorder.calls[0], QUIET * 3 * 0.9)

    async def test_failure_is_not_retried(self) -> None:
        recorder = Recorder(fail=True)
        scheduler = AutosaveScheduler(recorder.save, quiet_period=QUIET)
        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 6)

        self.assertEqual(len(recorder.calls), 1)
        self.assertFalse(scheduler.saving)
        self.assertTrue(recorder.dirty)

    async def test_deferred_save_runs_after_failed_save(self) -> None:
        calls: list[float] = []

        async def save() -> None:
            calls.append(time.monotonic())
            await asyncio.sleep(QUIET * 3)
            if len(calls) == 1:
                raise OSError("disk full")

        scheduler = AutosaveScheduler(save, quiet_period=QUIET)
        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 1.5)
        self.assertTrue(scheduler.saving)
        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 10)

        self.assertEqual(len(calls), 2)
        self.assertFalse(scheduler.saving)
        self.assertFalse(scheduler.pending)

    async def test_flush_cancels_timer_and_saves_immediately(self) -> None:
        recorder = Recorder()
        scheduler = AutosaveScheduler(
            recorder.save, quiet_period=10.0, is_dirty=lambda: recorder.dirty
        )
        scheduler.notify_activity()
        self.assertTrue(scheduler.pending)

        self.assertTrue(await scheduler.flush())
        self.assertFalse(scheduler.pending)
        self.assertEqual(len(recorder.calls), 1)
        self.assertFalse(await scheduler.flush())
        self.assertEqual(len(recorder.calls), 1)

    async def test_flush_waits_for_in_flight_save(self) -> None:
        recorder = Recorder(delay=QUIET * 2)
        scheduler = AutosaveScheduler(
            recorder.save, quiet_period=QUIET, is_dirty=lambda: recorder.dirty
        )
        scheduler.notify_activity()
        await asyncio.sleep(QUIET * 1.5)
        self.assertTrue(scheduler.saving)

        await scheduler.flush()

        self.assertFalse(scheduler.saving)
        self.assertEqual(recorder.max_active, 1)
        self.assertEqual(len(recorder.calls), 1)

    async def test_rearming_the_timer_writes_no_log_entries(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            paths = TrmnotesPaths(Path(tmp))
            set_active_logger(SessionLogger(paths, "all"))
            try:
                recorder = Recorder()
                scheduler = AutosaveScheduler(recorder.save, quiet_period=10.0)
                for _ in range(20):
                    scheduler.notify_activity()
                scheduler.cancel()
            finally:
                set_active_logger(None)

            self.assertFalse(paths.logs_dir.exists())

    async def test_cancel_drops_pending_timer(self) -> None:
        recorder = Recorder()
        scheduler = AutosaveScheduler(recorder.save, quiet_period=QUIET)
        scheduler.notify_activity()
        scheduler.cancel()
        await asyncio.sleep(QUIET * 3)
        self.assertEqual(recorder.calls, [])

    def test_negative_quiet_period_rejected(self) -> None:
        async def _save() -> None:
            return None

        with self.assertRaises(ValueError):
            AutosaveScheduler(_save, quiet_period=-1)


if __name__ == "__main__":
    unittest.main()
