"""Pytest configuration and fixtures."""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))


class RecordingNotifier:
    """Notifier that keeps every message for assertions."""

    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, msg: str) -> None:
        self.infos.append(msg)

    def warning(self, msg: str) -> None:
        self.warnings.append(msg)

    def error(self, msg: str) -> None:
        self.errors.append(msg)


class RecordingDispatcher:
    """Stand-in for CommandDispatcher that records dispatches instead of spawning."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def dispatch(self, template: str, file_path: str) -> None:
        self.calls.append((template, file_path))

    async def aclose(self, timeout: float = 5.0) -> None:
        pass


class _FakeWatch:
    def __init__(self, path: str, recursive: bool):
        self.path = path
        self.recursive = recursive


class FakeObserver:
    """In-memory observer with the schedule/remove/start/stop surface of watchdog's."""

    instances: list["FakeObserver"] = []

    def __init__(self, fail_paths: set[str] | None = None, fail_targets: set[str] | None = None):
        self.fail_paths = fail_paths or set()
        self.fail_targets = fail_targets or set()
        self.scheduled: list[tuple[object, _FakeWatch]] = []
        self.started = False
        self.stopped = False
        FakeObserver.instances.append(self)

    def schedule(self, event_handler, path: str, recursive: bool = False) -> _FakeWatch:
        if path in self.fail_paths:
            raise OSError(f"cannot watch {path}")
        if getattr(event_handler, "target", None) in self.fail_targets:
            raise OSError(f"cannot watch {event_handler.target}")
        watch = _FakeWatch(path, recursive)
        self.scheduled.append((event_handler, watch))
        return watch

    def remove_handler_for_watch(self, event_handler, watch) -> None:
        self.scheduled.remove((event_handler, watch))

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        pass

    def is_alive(self) -> bool:
        return self.started and not self.stopped


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def project_root(tmp_path):
    """A resolved, existing project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root.resolve()


@pytest.fixture
def fake_observers():
    """Track FakeObserver instances created during a test."""
    FakeObserver.instances = []
    yield FakeObserver.instances
    FakeObserver.instances = []
