# apps/trading/debounce.py
"""
Per-key debounced writes on the running asyncio loop.

Scheduling a key that already has a pending write cancels it, so only the
last scheduled write for a key within its window reaches the store.
Writes are fire-and-forget: failures are logged and dropped.
"""
import asyncio
import logging

logger = logging.getLogger(__name__)


class Debouncer:

    def __init__(self, loop=None):
        self._loop = loop
        self._handles = {}      # key → (TimerHandle, coroutine function)
        self._tasks = set()

    @property
    def loop(self):
        return self._loop or asyncio.get_running_loop()

    @property
    def pending(self):
        return sorted(self._handles)

    def schedule(self, key, delay, write):
        """Run ``write()`` after ``delay`` seconds unless rescheduled first."""
        previous = self._handles.pop(key, None)
        if previous is not None:
            previous[0].cancel()

        handle = self.loop.call_later(delay, self._fire, key)
        self._handles[key] = (handle, write)

    def cancel(self, key):
        previous = self._handles.pop(key, None)
        if previous is not None:
            previous[0].cancel()
            return True
        return False

    def _fire(self, key):
        entry = self._handles.pop(key, None)
        if entry is None:
            return
        _, write = entry
        task = self.loop.create_task(self._run(key, write))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, key, write):
        try:
            await write()
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception(f"Debounced write {key} failed")

    async def flush(self, key=None):
        """Fire pending writes (all, or just ``key``) now and wait for in-flight ones."""
        if key is None:
            keys = list(self._handles)
        else:
            keys = [key] if key in self._handles else []

        for pending_key in keys:
            handle, _ = self._handles[pending_key]
            handle.cancel()
            self._fire(pending_key)

        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
