"""Watch mode: re-run the build whenever component sources change."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Iterable, List

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .logging import get_logger

_IGNORED_EVENTS = {"opened", "closed", "closed_no_write"}

logger = get_logger("watch")


class RebuildHandler(FileSystemEventHandler):
    """Signals a pending rebuild for any change outside the ignored paths."""

    def __init__(self, trigger: threading.Event, ignore: Iterable[Path] = ()) -> None:
        super().__init__()
        self.trigger = trigger
        self.ignore: List[Path] = [Path(path).resolve() for path in ignore]

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in _IGNORED_EVENTS:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if all(not path or self._ignored(path) for path in paths):
            return
        logger.debug("Change detected: %s %s", event.event_type, event.src_path)
        self.trigger.set()

    def _ignored(self, raw: str | bytes) -> bool:
        path = Path(raw.decode() if isinstance(raw, bytes) else raw).resolve()
        return any(path == root or root in path.parents for root in self.ignore)


class Watcher:
    """Runs ``rebuild`` once per burst of file-system events."""

    def __init__(
        self,
        watch_dir: Path,
        rebuild: Callable[[], object],
        *,
        ignore: Iterable[Path] = (),
        debounce: float = 0.3,
        observer_factory: Callable[[], Observer] = Observer,
    ) -> None:
        self.watch_dir = watch_dir
        self.rebuild = rebuild
        self.debounce = debounce
        self.trigger = threading.Event()
        self.handler = RebuildHandler(self.trigger, ignore)
        self._observer_factory = observer_factory

    def run(self, stop: threading.Event | None = None, *, poll_interval: float = 0.5) -> None:
        """Block until ``stop`` is set (or the process is interrupted)."""
        stop = stop or threading.Event()
        observer = self._observer_factory()
        observer.schedule(self.handler, str(self.watch_dir), recursive=True)
        observer.start()
        logger.info("Watching %s for changes", self.watch_dir)
        try:
            while not stop.is_set():
                if not self.trigger.wait(timeout=poll_interval):
                    continue
                self.wait_for_quiet()
                self.run_once()
        finally:
            observer.stop()
            observer.join()

    def wait_for_quiet(self) -> None:
        self.trigger.clear()
        while self.trigger.wait(timeout=self.debounce):
            self.trigger.clear()

    def run_once(self) -> None:
        logger.info("Rebuilding...")
        try:
            self.rebuild()
        except (RuntimeError, OSError) as exc:
            # ConfigError, SchemaError and BuildError are all RuntimeErrors.
            logger.error("Rebuild failed: %s", exc)


__all__ = ["RebuildHandler", "Watcher"]
