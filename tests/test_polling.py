import threading

from polling import PeriodicTask, PollerRegistry


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_run_once_keeps_last_good_result():
    results = iter([1, RuntimeError("backend down"), 3])

    def fetch():
        value = next(results)
        if isinstance(value, Exception):
            raise value
        return value

    task = PeriodicTask("t", 60, fetch)
    task.run_once()
    task.run_once()

    assert task.latest == 1
    assert isinstance(task.last_error, RuntimeError)

    task.run_once()
    assert task.latest == 3
    assert task.last_error is None
    assert task.runs == 2


def test_poll_waits_for_the_interval():
    clock = FakeClock()
    calls = []
    task = PeriodicTask("dashboard", 60, lambda: calls.append(1) or len(calls), clock=clock)

    assert task.poll()
    clock.now += 10
    assert not task.poll()
    clock.now += 50
    assert task.poll()

    assert calls == [1, 1]
    assert task.latest == 2


def test_cancelled_task_drops_late_results():
    task = PeriodicTask("t", 60, lambda: "late")
    task.cancel()
    task.run_once()

    assert task.latest is None
    assert not task.poll()
    assert task.cancelled


def test_cancel_during_a_refresh_discards_its_answer():
    holder = {}

    def fetch():
        holder["task"].cancel()
        return "stale"

    task = PeriodicTask("t", 60, fetch)
    holder["task"] = task
    task.run_once()

    assert task.latest is None


def test_nothing_runs_between_polls():
    before = threading.active_count()
    clock = FakeClock()
    calls = []

    registry = PollerRegistry(clock=clock)
    registry.ensure("notifications", 0.05, lambda: calls.append(1))
    clock.now += 3600
    # a dropped browser session leaves nothing behind that keeps polling
    del registry

    assert calls == [1]
    assert threading.active_count() == before


def test_ensure_refreshes_before_returning_and_reuses_task():
    registry = PollerRegistry()
    calls = []

    first = registry.ensure("notifications", 60, lambda: calls.append(1) or len(calls))
    second = registry.ensure("notifications", 60, lambda: "other")

    assert first is second
    assert first.latest == 1
    assert calls == [1]


def test_retain_cancels_pages_left_behind():
    registry = PollerRegistry()
    notifications = registry.ensure("notifications", 60, lambda: None)
    dashboard = registry.ensure("dashboard", 60, lambda: None)

    registry.retain({"notifications"})

    assert dashboard.cancelled
    assert "dashboard" not in registry
    assert not notifications.cancelled

    registry.cancel_all()
    assert notifications.cancelled
    assert registry.get("notifications") is None


def test_ensure_after_cancel_starts_fresh():
    registry = PollerRegistry()
    old = registry.ensure("supervisor", 60, lambda: "a")
    registry.cancel("supervisor")

    new = registry.ensure("supervisor", 60, lambda: "b")

    assert new is not old
    assert new.latest == "b"
