"""Filesystem watcher for the data directory.

Wraps a watchdog Observer. Watchdog dispatches from its own thread, so
every notification is marshalled onto the event loop with
``call_soon_threadsafe`` before the change callback runs.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Callable, Protocol

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from .data_loader import DATA_FILE_SUFFIXES

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[str, str], None]

_WATCHED_EVENT_TYPES = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED}
)


class FileWatcher(Protocol):
    """What the DataManager needs from a watcher."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


WatcherFactory = Callable[[Path, ChangeCallback], FileWatcher]


def is_data_file(path: str, suffixes: frozenset[str] = DATA_FILE_SUFFIXES) -> bool:
    """Return True for non-hidden files with a watched suffix."""
    name = Path(path).name
    if not name or name.startswith("."):
        return False
    return Path(name).suffix.lower() in suffixes


class DataFileEventHandler(FileSystemEventHandler):
    """Filters watchdog events down to data-file changes.

    Runs on the observer thread; ``notify`` must be thread-safe.
    """

    def __init__(self, notify: ChangeCallback, suffixes: frozenset[str] = DATA_FILE_SUFFIXES):
        super().__init__()
        self._notify = notify
        self._suffixes = suffixes

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _WATCHED_EVENT_TYPES:
            return

        src_path = os.fsdecode(event.src_path)
        dest_path = os.fsdecode(getattr(event, "dest_path", "") or "")
        for path in (dest_path, src_path):
            if path and is_data_file(path, self._suffixes):
                self._notify(event.event_type, path)
                return


class DataDirectoryWatcher:
    """Watch one directory (non-recursively) for data-file changes.

    Usage:
        watcher = DataDirectoryWatcher(Path("data"), on_change)
        watcher.start()   # must be called from inside the event loop
        ...
        watcher.stop()

    ``on_change(event_type, path)`` is always invoked on the event loop.
    """

    def __init__(
        self,
        path: Path,
        on_change: ChangeCallback,
        loop: asyncio.AbstractEventLoop | None = None,
        suffixes: frozenset[str] = DATA_FILE_SUFFIXES,
    ) -> None:
        self._path = Path(path)
        self._on_change = on_change
        self._loop = loop
        self._suffixes = suffixes
        self._observer: Observer | None = None

    @property
    def is_running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Start the observer thread.

        Raises:
            OSError: If the directory cannot be watched.
        """
        if self._observer is not None:
            return

        loop = self._loop or asyncio.get_running_loop()
        self._loop = loop

        def notify(event_type: str, path: str) -> None:
            try:
                loop.call_soon_threadsafe(self._on_change, event_type, path)
            except RuntimeError:
                # Loop already closed; nothing left to reload
                logger.debug("Dropped %s event for %s after loop shutdown", event_type, path)

        observer = Observer()
        observer.schedule(
            DataFileEventHandler(notify, self._suffixes), str(self._path), recursive=False
        )
        observer.daemon = True
        observer.start()
        self._observer = observer
        logger.info("Watching %s for data changes", self._path)

    def stop(self) -> None:
        """Stop the observer thread. Safe to call more than once."""
        observer = self._observer
        if observer is None:
            return
        self._observer = None
        observer.stop()
        observer.join(timeout=5.0)
        logger.info("Stopped watching %s", self._path)


def default_watcher_factory(path: Path, on_change: ChangeCallback) -> FileWatcher:
    """Build a watchdog-backed watcher bound to the running loop."""
    return DataDirectoryWatcher(path, on_change)
