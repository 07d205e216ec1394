# polling.py
"""
Periodic refreshes for the shell and the live screens.

A PeriodicTask keeps the last result of its function in `latest` but
never runs on its own. The st.fragment(run_every=...) that shows the
data calls poll() on each tick, so refreshing stops together with the
browser session. poll() only reaches the backend once `interval`
seconds have passed; full-page reruns in between reuse `latest`.
A cancelled task drops anything that arrives after cancel().
"""
import logging
import time
from typing import Any, Callable, Dict, Iterable, Optional

logger = logging.getLogger(__name__)

# fragment ticks may land a little before the interval has fully elapsed
EARLY_TICK_SLACK = 1.0


class PeriodicTask:
    def __init__(self, name: str, interval: float, func: Callable[[], Any], clock=time.monotonic):
        self.name = name
        self.interval = interval
        self.func = func
        self.latest: Any = None
        self.last_error: Optional[Exception] = None
        self.last_run: Optional[float] = None
        self.runs = 0
        self._clock = clock
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def due(self) -> bool:
        if self._cancelled:
            return False
        if self.last_run is None:
            return True
        return self._clock() - self.last_run + EARLY_TICK_SLACK >= self.interval

    def poll(self) -> bool:
        """Refresh when the interval has passed. Returns whether it did."""
        if not self.due():
            return False
        self.run_once()
        return True

    def run_once(self) -> None:
        if self._cancelled:
            return
        self.last_run = self._clock()
        try:
            result = self.func()
        except Exception as e:
            # a failed refresh keeps the previous data on screen
            logger.error("Error refreshing %s: %s", self.name, e)
            self.last_error = e
            return
        if self._cancelled:
            return
        self.latest = result
        self.last_error = None
        self.runs += 1


class PollerRegistry:
    """The refreshes of one browser session, by name."""

    def __init__(self, clock=time.monotonic):
        self._tasks: Dict[str, PeriodicTask] = {}
        self._clock = clock

    def get(self, name: str) -> Optional[PeriodicTask]:
        return self._tasks.get(name)

    def ensure(self, name: str, interval: float, func: Callable[[], Any]) -> PeriodicTask:
        """Register `name` unless it is live. A new task refreshes before returning."""
        task = self._tasks.get(name)
        if task is not None and not task.cancelled:
            return task
        task = PeriodicTask(name, interval, func, clock=self._clock)
        self._tasks[name] = task
        task.run_once()
        return task

    def cancel(self, name: str) -> None:
        task = self._tasks.pop(name, None)
        if task is not None:
            task.cancel()

    def retain(self, names: Iterable[str]) -> None:
        keep = set(names)
        for name in [n for n in self._tasks if n not in keep]:
            self.cancel(name)

    def cancel_all(self) -> None:
        self.retain(())

    def __contains__(self, name):
        return name in self._tasks
