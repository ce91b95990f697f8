"""Watch mode: re-run analysis when source files change."""

from __future__ import annotations

import threading
from pathlib import Path
from threading import Timer
from typing import Callable, List, Optional, Sequence, Set

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .diagnostics import AnalysisError
from .loader import matches
from .logging import get_logger

ChangeCallback = Callable[[List[str]], object]

logger = get_logger("watcher")


class DebouncedChangeHandler(FileSystemEventHandler):
    """Coalesces a burst of file events into one callback with the changed paths."""

    def __init__(
        self,
        root: Path,
        globs: Sequence[str],
        callback: ChangeCallback,
        debounce_seconds: float = 0.2,
    ) -> None:
        super().__init__()
        self.root = root.resolve()
        self.globs = list(globs)
        self.callback = callback
        self.debounce_seconds = debounce_seconds
        self.debounce_timer: Optional[Timer] = None
        self._pending: Set[str] = set()
        self._lock = threading.Lock()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [event.src_path]
        if event.event_type == "moved":
            paths.append(getattr(event, "dest_path", ""))
        relevant = [rel for rel in (self.relative(path) for path in paths if path) if rel is not None]
        if not relevant:
            return
        logger.debug("File %s: %s", event.event_type, ", ".join(relevant))
        with self._lock:
            self._pending.update(relevant)
            self._reset_timer()

    def relative(self, path: str | bytes) -> Optional[str]:
        """Return the POSIX path relative to the root when it matches the globs."""
        if isinstance(path, bytes):
            path = path.decode("utf-8", errors="replace")
        try:
            rel = Path(path).resolve().relative_to(self.root).as_posix()
        except ValueError:
            return None
        return rel if matches(rel, self.globs) else None

    def cancel(self) -> None:
        with self._lock:
            if self.debounce_timer is not None:
                self.debounce_timer.cancel()
                self.debounce_timer = None

    def flush(self) -> None:
        """Fire the callback with everything collected since the last flush."""
        with self._lock:
            changed = sorted(self._pending)
            self._pending.clear()
            self.debounce_timer = None
        if not changed:
            return
        logger.info("Change detected in %d file(s); re-analyzing", len(changed))
        try:
            self.callback(changed)
        except AnalysisError as exc:
            logger.error("Analysis failed: %s", exc)

    def _reset_timer(self) -> None:
        if self.debounce_timer is not None:
            self.debounce_timer.cancel()
        self.debounce_timer = Timer(self.debounce_seconds, self.flush)
        self.debounce_timer.daemon = True
        self.debounce_timer.start()


class ManifestWatcher:
    """Owns the watchdog observer scheduled on the project root."""

    def __init__(
        self,
        root: Path,
        globs: Sequence[str],
        callback: ChangeCallback,
        debounce_seconds: float = 0.2,
    ) -> None:
        self.root = root.resolve()
        self.handler = DebouncedChangeHandler(self.root, globs, callback, debounce_seconds)
        self.observer: Optional[Observer] = None

    def start(self) -> None:
        self.observer = Observer()
        self.observer.schedule(self.handler, str(self.root), recursive=True)
        self.observer.start()
        logger.info("Watching %s for changes", self.root)

    def stop(self) -> None:
        self.handler.cancel()
        if self.observer is None:
            return
        self.observer.stop()
        self.observer.join(timeout=5)
        if self.observer.is_alive():
            logger.warning("Observer thread did not stop within timeout")
        self.observer = None

    def is_active(self) -> bool:
        return self.observer is not None and self.observer.is_alive()

    def __enter__(self) -> "ManifestWatcher":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()


__all__ = ["ChangeCallback", "DebouncedChangeHandler", "ManifestWatcher"]
