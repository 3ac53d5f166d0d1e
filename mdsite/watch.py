from __future__ import annotations

import os
import sys
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .utils import is_within

DEFAULT_QUIET_PERIOD = 0.5
WATCHED_EVENTS = {EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED}


class Debouncer:
    """Run scheduled work once the schedule calls have been quiet for ``delay`` seconds."""

    def __init__(self, delay: float = DEFAULT_QUIET_PERIOD) -> None:
        self.delay = delay
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._timer: threading.Timer | None = None

    def schedule(self, work: Callable[[], object]) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()

            def fire() -> None:
                self._fire(timer, work)

            timer = threading.Timer(self.delay, fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self, timer: threading.Timer, work: Callable[[], object]) -> None:
        with self._lock:
            # a reschedule replaced this timer after it had already expired
            if self._timer is not timer:
                return
            self._timer = None
        self.run(work)

    def run(self, work: Callable[[], object]) -> object:
        """Run work now, serialized with any timer-fired run."""
        with self._run_lock:
            return work()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None


class ChangeHandler(FileSystemEventHandler):
    def __init__(self, on_change: Callable[[], None], ignore: Iterable[Path] = ()) -> None:
        super().__init__()
        self.on_change = on_change
        self.ignore = [Path(path) for path in ignore]

    def is_ignored(self, path: str) -> bool:
        return any(is_within(Path(path), root) for root in self.ignore)

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in WATCHED_EVENTS:
            return
        paths = [event.src_path]
        if event.event_type == EVENT_TYPE_MOVED:
            paths.append(event.dest_path)
        if all(self.is_ignored(os.fsdecode(path)) for path in paths):
            return
        self.on_change()


class Watcher:
    """Recursively observe ``root`` and feed every qualifying change to a debouncer."""

    def __init__(
        self,
        root: Path,
        debouncer: Debouncer,
        work: Callable[[], object],
        ignore: Iterable[Path] = (),
    ) -> None:
        self.root = Path(root)
        self.debouncer = debouncer
        self.work = work
        self.handler = ChangeHandler(self.notify, ignore)
        self._observer: Observer | None = None
        self._stopped = threading.Event()

    def notify(self) -> None:
        self.debouncer.schedule(self.work)

    def start(self) -> None:
        if not self.root.is_dir():
            raise FileNotFoundError(f"watch root is not a directory: {self.root}")
        observer = Observer()
        observer.schedule(self.handler, str(self.root), recursive=True)
        observer.start()
        self._observer = observer

    def stop(self) -> None:
        self._stopped.set()
        observer = self._observer
        self._observer = None
        if observer is not None:
            observer.stop()
            if observer.is_alive():
                observer.join()
        self.debouncer.cancel()

    @property
    def alive(self) -> bool:
        return self._observer is not None and self._observer.is_alive()

    def run_forever(self, poll_interval: float = 1.0) -> None:
        self._stopped.clear()
        if self._observer is None:
            self.start()
        while not self._stopped.wait(poll_interval):
            if self.alive:
                continue
            print(f"watch error: observer for {self.root} stopped, restarting", file=sys.stderr)
            try:
                self.start()
            except OSError as exc:
                self._observer = None
                print(f"watch error: {exc}", file=sys.stderr)
