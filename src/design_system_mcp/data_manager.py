"""Owner of the authoritative in-memory design system snapshot.

The DataManager loads the data directory through a DataLoader, publishes
each fully valid load as a new CacheSnapshot by a single reference swap,
and keeps the snapshot fresh from filesystem notifications and optional
staleness checks.

Reloads never overlap. A trigger that arrives while a load is running
marks the cycle dirty and exactly one more load runs once the current one
finishes, however many triggers arrived in between.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable

from .config import DataSettings
from .data_loader import DataLoader
from .errors import DesignSystemError
from .events import EventChannel
from .file_watcher import FileWatcher, WatcherFactory, default_watcher_factory
from .models import CacheSnapshot, DataLoadResult

logger = logging.getLogger(__name__)

DESTROYED_MESSAGE = "DataManager has been destroyed"


class DataManager:
    """Loads, caches and hot-reloads the design system corpus.

    Usage:
        async with DataManager(config.data) as manager:
            snapshot = manager.get_cached_data()

    Events (``manager.events``):
        data_loaded(snapshot)
        data_load_failed(errors)
        file_changed()
        watch_error(exc)
    """

    def __init__(
        self,
        settings: DataSettings,
        *,
        loader: DataLoader | None = None,
        watcher_factory: WatcherFactory | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Create an idle manager; nothing is read until initialize().

        Args:
            settings: Data directory and cache settings.
            loader: Loader/validator. Defaults to a DataLoader on settings.data_path.
            watcher_factory: Builds the filesystem watcher. Defaults to watchdog.
            clock: Monotonic time source in seconds for cache validity.
        """
        self._settings = settings
        self._loader = loader or DataLoader(settings.data_path)
        self._watcher_factory = watcher_factory or default_watcher_factory
        self._clock = clock or time.monotonic
        self.events = EventChannel("DataManager")

        self._cache: CacheSnapshot | None = None
        self._cache_loaded_at: float | None = None
        self._last_errors: list[str] = []
        self._load_count = 0
        self._failed_load_count = 0

        self._loading = False
        self._reload_requested = False
        self._reload_task: asyncio.Task[DataLoadResult] | None = None

        self._watcher: FileWatcher | None = None
        self._debounce_handle: asyncio.TimerHandle | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._destroyed = False

    @property
    def settings(self) -> DataSettings:
        return self._settings

    @property
    def is_loading(self) -> bool:
        """True while a load is reading or validating files."""
        return self._loading

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None

    async def __aenter__(self) -> DataManager:
        try:
            await self.initialize()
        except BaseException:
            await self.aclose()
            raise
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def initialize(self) -> DataLoadResult:
        """Run the first load and start the configured background activity.

        A failed first load is returned, not raised; watching still starts
        so that fixing the files triggers a reload.

        Raises:
            DesignSystemError: CONFIGURATION if the data directory is missing.
        """
        self._loader.check_source()
        result = await self.load_data()

        if self._settings.enable_file_watching:
            self.start_file_watching()
        if self._settings.auto_refresh:
            self._start_auto_refresh()

        if result.success:
            logger.info("DataManager initialized from %s", self._settings.data_path)
        else:
            logger.warning(
                "DataManager initialized without data (%d errors)", len(result.errors)
            )
        return result

    async def load_data(self) -> DataLoadResult:
        """Reload now, joining any reload already in progress.

        Returns:
            The result of the last load in the cycle this call joined.
        """
        if self._destroyed:
            return DataLoadResult(success=False, errors=[DESTROYED_MESSAGE])
        task = self._schedule_reload()
        return await asyncio.shield(task)

    def request_reload(self) -> None:
        """Trigger a reload without waiting for it."""
        if self._destroyed:
            return
        self._schedule_reload()

    def get_cached_data(self) -> CacheSnapshot | None:
        """Return the current snapshot, or None before the first successful load."""
        return self._cache

    def is_cache_valid(self) -> bool:
        """True if a snapshot exists and is no older than cache_timeout."""
        if self._cache is None or self._cache_loaded_at is None:
            return False
        return self._clock() - self._cache_loaded_at <= self._settings.cache_timeout

    def refresh_if_stale(self) -> bool:
        """Trigger a reload when the cache is missing or expired.

        Returns:
            True if a reload was triggered.
        """
        if self.is_cache_valid():
            return False
        logger.debug("Cache is stale; requesting reload")
        self.request_reload()
        return True

    def start_file_watching(self) -> None:
        """Watch the data directory and reload on changes."""
        if self._watcher is not None or self._destroyed:
            return
        watcher = self._watcher_factory(self._settings.data_path, self._on_file_event)
        try:
            watcher.start()
        except OSError as exc:
            logger.error("Cannot watch %s: %s", self._settings.data_path, exc)
            self.events.emit("watch_error", exc)
            return
        self._watcher = watcher

    def stop_file_watching(self) -> None:
        watcher = self._detach_watcher()
        if watcher is not None:
            watcher.stop()

    async def aclose(self) -> None:
        """Stop the watcher off the event loop, then destroy().

        Joining the observer thread can take a moment, so async teardown
        paths use this instead of calling destroy() directly.
        """
        watcher = self._detach_watcher()
        if watcher is not None:
            await asyncio.to_thread(watcher.stop)
        self.destroy()

    def stats(self) -> dict[str, Any]:
        """Return a JSON-friendly status summary for health reporting."""
        snapshot = self._cache
        return {
            "has_data": snapshot is not None,
            "cache_valid": self.is_cache_valid(),
            "last_updated": snapshot.last_updated.isoformat() if snapshot else None,
            "counts": snapshot.counts() if snapshot else None,
            "is_loading": self._loading,
            "is_watching": self.is_watching,
            "load_count": self._load_count,
            "failed_load_count": self._failed_load_count,
            "last_errors": list(self._last_errors),
        }

    def destroy(self) -> None:
        """Stop watching, cancel timers and in-flight work, drop the cache.

        Safe to call more than once and before initialize().
        """
        if self._destroyed:
            return
        self._destroyed = True

        self.stop_file_watching()
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        if self._reload_task is not None and not self._reload_task.done():
            self._reload_task.cancel()
        self._reload_task = None
        self._reload_requested = False

        self._cache = None
        self._cache_loaded_at = None
        self.events.clear()
        logger.debug("DataManager destroyed")

    def _detach_watcher(self) -> FileWatcher | None:
        self._cancel_debounce()
        watcher, self._watcher = self._watcher, None
        return watcher

    def _schedule_reload(self) -> asyncio.Task[DataLoadResult]:
        self._reload_requested = True
        task = self._reload_task
        if task is not None and not task.done():
            logger.debug("Reload already in progress; coalescing request")
            return task

        task = asyncio.get_running_loop().create_task(self._drain_reloads())
        task.add_done_callback(self._on_reload_done)
        self._reload_task = task
        return task

    async def _drain_reloads(self) -> DataLoadResult:
        result = DataLoadResult(success=False)
        while self._reload_requested:
            self._reload_requested = False
            result = await self._load_once()
        return result

    def _on_reload_done(self, task: asyncio.Task[DataLoadResult]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Unexpected error while reloading data: %s", exc, exc_info=exc)

    async def _load_once(self) -> DataLoadResult:
        self._loading = True
        try:
            outcome = await self._loader.load()
        except DesignSystemError as err:
            return self._publish_failure([err.message])
        finally:
            self._loading = False

        if self._destroyed:
            return DataLoadResult(success=False, errors=[DESTROYED_MESSAGE])
        if not outcome.ok:
            return self._publish_failure(outcome.errors)

        snapshot = CacheSnapshot(
            design_tokens=tuple(outcome.design_tokens),
            components=tuple(outcome.components),
            guidelines=tuple(outcome.guidelines),
            last_updated=datetime.now(timezone.utc),
        )
        # Single reference swap; readers keep whichever snapshot they hold
        self._cache = snapshot
        self._cache_loaded_at = self._clock()
        self._last_errors = []
        self._load_count += 1

        counts = snapshot.counts()
        logger.info(
            "Loaded design system data: %d tokens, %d components, %d guidelines",
            counts["design_tokens"],
            counts["components"],
            counts["guidelines"],
        )
        self.events.emit("data_loaded", snapshot)
        return DataLoadResult(success=True, data=snapshot)

    def _publish_failure(self, errors: list[str]) -> DataLoadResult:
        self._last_errors = list(errors)
        self._failed_load_count += 1
        logger.warning(
            "Data load failed with %d error(s); keeping previous snapshot", len(errors)
        )
        for message in errors:
            logger.debug("  %s", message)
        self.events.emit("data_load_failed", list(errors))
        return DataLoadResult(success=False, errors=list(errors))

    def _on_file_event(self, event_type: str, path: str) -> None:
        if self._destroyed:
            return
        # Any notification means "something changed"; the path is informational only
        logger.debug("Data file %s: %s", event_type, path)
        self.events.emit("file_changed")

        delay = self._settings.reload_debounce
        if delay <= 0:
            self.request_reload()
            return
        self._cancel_debounce()
        self._debounce_handle = asyncio.get_running_loop().call_later(
            delay, self._on_debounce_elapsed
        )

    def _on_debounce_elapsed(self) -> None:
        self._debounce_handle = None
        self.request_reload()

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    def _start_auto_refresh(self) -> None:
        if self._refresh_task is not None:
            return
        if self._settings.cache_timeout <= 0:
            logger.warning("auto_refresh ignored: cache_timeout must be positive")
            return
        self._refresh_task = asyncio.get_running_loop().create_task(self._refresh_loop())

    async def _refresh_loop(self) -> None:
        interval = self._settings.cache_timeout
        while not self._destroyed:
            await asyncio.sleep(interval)
            self.refresh_if_stale()
