from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

from guardian.core.config import get_settings
from guardian.core.logger import get_logger

log = get_logger(__name__)


PeriodicCallable = Callable[[], Awaitable[None]]


class PeriodicScheduler:
    """Very small periodic task scheduler.

    schedule(coro_func, interval) will run the coroutine indefinitely at
    approximately the given interval until stop() is called.
    """

    def __init__(self) -> None:
        self._tasks: list[asyncio.Task] = []
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        self._running = True

    async def stop(self) -> None:
        self._running = False
        for t in self._tasks:
            t.cancel()
        for t in self._tasks:
            try:
                await t
            except asyncio.CancelledError:
                pass
        self._tasks.clear()

    def schedule(self, func: PeriodicCallable, interval_sec: float) -> None:
        async def _loop() -> None:
            while self._running:
                start = time.time()
                try:
                    await func()
                except Exception:
                    log.exception("Periodic task failed")
                elapsed = time.time() - start
                await asyncio.sleep(max(0.0, interval_sec - elapsed))

        task = asyncio.create_task(_loop())
        self._tasks.append(task)


_scheduler: Optional[PeriodicScheduler] = None


def get_scheduler() -> PeriodicScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = PeriodicScheduler()
    return _scheduler


# Housekeeping: staged uploads are normally deleted right after analysis;
# this catches files left behind by crashed requests.
async def cleanup_uploads(max_age_sec: Optional[float] = None,
                          directory: Optional[Path] = None) -> int:
    settings = get_settings()
    max_age = settings.UPLOAD_MAX_AGE_SEC if max_age_sec is None else max_age_sec
    base = Path(directory or settings.UPLOAD_DIR)
    if not base.exists():
        return 0
    now = time.time()
    removed = 0
    for p in base.rglob("*"):
        try:
            if p.is_file() and now - p.stat().st_mtime > max_age:
                p.unlink(missing_ok=True)
                removed += 1
        except OSError:
            log.warning("Could not remove stale upload %s", p)
    if removed:
        log.info("Cleaned %d stale uploads from %s", removed, base)
    return removed
