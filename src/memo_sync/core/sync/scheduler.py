"""Debounced scheduling of pushes after local edits.

Bursts of edits coalesce into one push fired ``delay`` seconds after the
last one. A newer edit cancels the pending timer. While the engine reports
no connectivity the scheduled push is skipped until an explicit ``flush``
or another engine operation reaches the remote again.
"""

import logging
import threading
from typing import Callable, Optional

from .engine import SyncEngine

logger = logging.getLogger(__name__)

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


def _daemon_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class DebouncedPushScheduler:
    """Coalesce local mutations into a single delayed push."""

    def __init__(
        self,
        engine: SyncEngine,
        delay: float = 2.0,
        timer_factory: Optional[TimerFactory] = None,
    ) -> None:
        """Initialize scheduler.

        Args:
            engine: Sync engine to push through
            delay: Quiescence window in seconds
            timer_factory: Creates the timer (override in tests)
        """
        self.engine = engine
        self.delay = delay
        self.timer_factory = timer_factory or _daemon_timer
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._lock = threading.Lock()
        self.pushes_attempted = 0
        self.pushes_skipped = 0

    @property
    def pending(self) -> bool:
        """Whether a push is scheduled."""
        with self._lock:
            return self._timer is not None

    def notify_change(self) -> None:
        """Schedule a push, replacing any pending one."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            generation = self._generation
            self._timer = self.timer_factory(
                self.delay, lambda: self._fire(generation)
            )
            self._timer.start()
        logger.debug("Push scheduled in %.1fs", self.delay)

    def cancel(self) -> None:
        """Drop the pending push, if any."""
        with self._lock:
            self._drop_timer()

    def flush(self) -> Optional[bool]:
        """Run the pending push now, even while offline.

        Returns:
            The push result, or None if nothing was pending
        """
        with self._lock:
            if self._timer is None:
                return None
            self._drop_timer()
        return self._run_push(force=True)

    def _drop_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        # A timer that already fired must not run after being dropped
        self._generation += 1

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation:
                return
            self._timer = None
        self._run_push()

    def _run_push(self, force: bool = False) -> bool:
        if self.engine.is_offline and not force:
            self.pushes_skipped += 1
            logger.info("Offline, skipping scheduled push")
            return False
        self.pushes_attempted += 1
        return self.engine.push_local_to_remote()
