"""Tests for DebouncedWatchUnit."""

import asyncio
import shutil

import pytest
from watchdog.events import DirModifiedEvent, FileCreatedEvent, FileModifiedEvent, FileMovedEvent
from watchdog.observers import Observer

from filetrigger.errors import WatchRegistrationError
from filetrigger.file_watcher import DebouncedWatchUnit
from filetrigger.models import WatchState

from conftest import FakeObserver

QUIET = 0.05


def make_unit(target, loop, calls, quiet=QUIET):
    return DebouncedWatchUnit(target, lambda: calls.append(loop.time()), loop, quiet_period=quiet)


class TestDebounce:
    """Trailing debounce behavior."""

    @pytest.mark.asyncio
    async def test_burst_coalesces_to_one_fire(self, project_root):
        """Events closer together than the quiet period fire once, after the last one."""
        loop = asyncio.get_running_loop()
        calls = []
        unit = make_unit(project_root / "trigger", loop, calls)
        unit.start(FakeObserver())

        last_event = 0.0
        for _ in range(5):
            unit.notify()
            last_event = loop.time()
            await asyncio.sleep(QUIET / 5)

        assert unit.state is WatchState.PENDING_FIRE
        await asyncio.sleep(QUIET * 4)

        assert len(calls) == 1
        # Allow for the loop's clock resolution
        assert calls[0] >= last_event + QUIET - 0.01
        assert unit.state is WatchState.WATCHING
        assert not unit.pending

    @pytest.mark.asyncio
    async def test_separated_events_fire_twice(self, project_root):
        """Events further apart than the quiet period each fire."""
        loop = asyncio.get_running_loop()
        calls = []
        unit = make_unit(project_root / "trigger", loop, calls)
        unit.start(FakeObserver())

        unit.notify()
        await asyncio.sleep(QUIET * 3)
        unit.notify()
        await asyncio.sleep(QUIET * 3)

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_stop_cancels_pending_fire(self, project_root):
        """stop() while a timer is pending means the callback never runs."""
        loop = asyncio.get_running_loop()
        calls = []
        unit = make_unit(project_root / "trigger", loop, calls)
        unit.start(FakeObserver())

        unit.notify()
        assert unit.pending
        unit.stop()
        await asyncio.sleep(QUIET * 4)

        assert calls == []
        assert unit.state is WatchState.STOPPED

    @pytest.mark.asyncio
    async def test_notify_after_stop_is_ignored(self, project_root):
        """Events queued before stop() but delivered after it do not re-arm the timer."""
        loop = asyncio.get_running_loop()
        calls = []
        unit = make_unit(project_root / "trigger", loop, calls)
        unit.start(FakeObserver())
        unit.stop()

        unit.notify()
        await asyncio.sleep(QUIET * 3)

        assert calls == []
        assert not unit.pending

    @pytest.mark.asyncio
    async def test_callback_error_does_not_break_unit(self, project_root):
        """A raising callback is logged and the next burst still fires."""
        loop = asyncio.get_running_loop()
        calls = []

        def flaky():
            calls.append(loop.time())
            if len(calls) == 1:
                raise RuntimeError("boom")

        unit = DebouncedWatchUnit(project_root / "trigger", flaky, loop, quiet_period=QUIET)
        unit.start(FakeObserver())

        unit.notify()
        await asyncio.sleep(QUIET * 3)
        unit.notify()
        await asyncio.sleep(QUIET * 3)

        assert len(calls) == 2


class TestRegistration:
    """start()/stop() against the event source."""

    @pytest.mark.asyncio
    async def test_start_watches_existing_parent(self, project_root):
        loop = asyncio.get_running_loop()
        observer = FakeObserver()
        unit = make_unit(project_root / "trigger", loop, [])

        unit.start(observer)

        assert len(observer.scheduled) == 1
        _, watch = observer.scheduled[0]
        assert watch.path == str(project_root)
        assert watch.recursive is False
        assert unit.state is WatchState.WATCHING

    @pytest.mark.asyncio
    async def test_start_missing_parent_watches_ancestor_recursively(self, project_root):
        loop = asyncio.get_running_loop()
        observer = FakeObserver()
        unit = make_unit(project_root / "not" / "yet" / "trigger", loop, [])

        unit.start(observer)

        _, watch = observer.scheduled[0]
        assert watch.path == str(project_root)
        assert watch.recursive is True

    @pytest.mark.asyncio
    async def test_anchor_is_watched_instead_of_parent(self, project_root):
        (project_root / "out").mkdir()
        loop = asyncio.get_running_loop()
        observer = FakeObserver()
        nested = DebouncedWatchUnit(project_root / "out" / "done", lambda: None, loop, anchor=project_root)
        direct = DebouncedWatchUnit(project_root / "trigger", lambda: None, loop, anchor=project_root)

        nested.start(observer)
        direct.start(observer)

        watches = [(watch.path, watch.recursive) for _, watch in observer.scheduled]
        assert watches == [(str(project_root), True), (str(project_root), False)]

    @pytest.mark.asyncio
    async def test_start_failure_raises_registration_error(self, project_root):
        loop = asyncio.get_running_loop()
        observer = FakeObserver(fail_paths={str(project_root)})
        unit = make_unit(project_root / "trigger", loop, [])

        with pytest.raises(WatchRegistrationError):
            unit.start(observer)
        assert unit.state is WatchState.STOPPED

    @pytest.mark.asyncio
    async def test_stop_is_idempotent_and_releases_watch(self, project_root):
        loop = asyncio.get_running_loop()
        observer = FakeObserver()
        unit = make_unit(project_root / "trigger", loop, [])
        unit.start(observer)

        unit.stop()
        unit.stop()

        assert observer.scheduled == []

    @pytest.mark.asyncio
    async def test_stopped_unit_cannot_restart(self, project_root):
        loop = asyncio.get_running_loop()
        unit = make_unit(project_root / "trigger", loop, [])
        unit.stop()

        with pytest.raises(RuntimeError):
            unit.start(FakeObserver())


class TestEventFiltering:
    """Raw watchdog events reaching the handler."""

    @pytest.mark.asyncio
    async def test_only_target_events_are_forwarded(self, project_root):
        loop = asyncio.get_running_loop()
        calls = []
        target = project_root / "trigger"
        observer = FakeObserver()
        unit = make_unit(target, loop, calls)
        unit.start(observer)
        handler, _ = observer.scheduled[0]

        handler.dispatch(FileModifiedEvent(str(project_root / "other")))
        handler.dispatch(DirModifiedEvent(str(project_root)))
        await asyncio.sleep(QUIET * 3)
        assert calls == []

        handler.dispatch(FileCreatedEvent(str(target)))
        handler.dispatch(FileModifiedEvent(str(target)))
        await asyncio.sleep(QUIET * 3)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_rename_onto_target_counts_as_change(self, project_root):
        loop = asyncio.get_running_loop()
        calls = []
        target = project_root / "trigger"
        observer = FakeObserver()
        unit = make_unit(target, loop, calls)
        unit.start(observer)
        handler, _ = observer.scheduled[0]

        handler.dispatch(FileMovedEvent(str(project_root / "trigger.tmp"), str(target)))
        await asyncio.sleep(QUIET * 3)

        assert len(calls) == 1


@pytest.mark.asyncio
async def test_real_observer_fires_on_write(project_root):
    """End to end with a real watchdog observer."""
    loop = asyncio.get_running_loop()
    fired = asyncio.Event()
    target = project_root / "trigger"
    unit = DebouncedWatchUnit(target, fired.set, loop, quiet_period=QUIET)

    observer = Observer()
    observer.start()
    try:
        unit.start(observer)
        target.write_text("done")
        await asyncio.wait_for(fired.wait(), timeout=5.0)
    finally:
        unit.stop()
        observer.stop()
        observer.join(timeout=2.0)

    assert fired.is_set()


@pytest.mark.asyncio
async def test_real_observer_survives_parent_recreated(project_root):
    """A job that wipes and recreates the output directory still triggers the unit."""
    loop = asyncio.get_running_loop()
    fired = asyncio.Event()
    out = project_root / "out"
    out.mkdir()
    target = out / "done"
    unit = DebouncedWatchUnit(target, fired.set, loop, quiet_period=QUIET, anchor=project_root)

    observer = Observer()
    observer.start()
    try:
        unit.start(observer)
        shutil.rmtree(out)
        await asyncio.sleep(0.1)
        out.mkdir()
        await asyncio.sleep(0.1)
        target.write_text("done")
        await asyncio.wait_for(fired.wait(), timeout=5.0)
    finally:
        unit.stop()
        observer.stop()
        observer.join(timeout=2.0)

    assert fired.is_set()
