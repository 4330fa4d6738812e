"""
OS change notifications as a poll trigger.

Native notifications are only used as a hint that something under the
tracked root changed; the events themselves always come from diffing
snapshots. Bursts of notifications are debounced into a single
``request_poll()`` on the target's event loop.
"""

import asyncio
import logging
import os
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from dirpoll.config.settings import PollerConfig
from dirpoll.core.interfaces import IPollTarget
from dirpoll.models import MonitoringError

logger = logging.getLogger(__name__)

# Scanning the tree opens directories; reacting to that would re-trigger forever.
_IGNORED_EVENT_TYPES = frozenset({"opened", "closed", "closed_no_write"})


class NativeChangeTrigger(FileSystemEventHandler):
    """
    Watchdog handler that asks a poll target for an early poll cycle.
    """

    def __init__(
        self,
        target: IPollTarget,
        config: PollerConfig | None = None,
        debounce_seconds: float | None = None,
    ):
        """
        Initialize the trigger.

        Args:
            target: Poller (or any poll target) to wake up
            config: Optional configuration providing ignore patterns and debounce
            debounce_seconds: Quiet period before a request is sent
        """
        super().__init__()
        self.target = target
        self.config = config
        if debounce_seconds is None:
            debounce_seconds = config.trigger_debounce_seconds if config else 0.5
        self.debounce_seconds = debounce_seconds

        self._observer: Observer | None = None
        self._watched_paths: set[str] = set()
        self._root: Path | None = None

        # Store reference to the main event loop for cross-thread scheduling
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: asyncio.TimerHandle | None = None
        self._requests_sent = 0

    def start_watching(self, directory_path: Path, recursive: bool = True) -> None:
        """
        Start watching a directory for native change notifications.

        Args:
            directory_path: Path to directory to monitor
            recursive: Whether to monitor subdirectories

        Raises:
            MonitoringError: If monitoring cannot be started
        """
        try:
            if not directory_path.exists():
                raise MonitoringError(
                    f"Directory does not exist: {directory_path}", path=str(directory_path), operation="start_watching"
                )

            if not directory_path.is_dir():
                raise MonitoringError(
                    f"Path is not a directory: {directory_path}", path=str(directory_path), operation="start_watching"
                )

            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning("No running event loop found - poll requests cannot be delivered")

            if self._observer is None:
                self._observer = Observer()

            directory_str = str(directory_path.resolve())
            if directory_str not in self._watched_paths:
                self._observer.schedule(self, directory_str, recursive=recursive)
                self._watched_paths.add(directory_str)
                self._root = directory_path.resolve()
                logger.info("Watching %s for native changes (recursive: %s)", directory_path, recursive)

            if not self._observer.is_alive():
                self._observer.start()
                logger.info("Native change observer started")

        except MonitoringError:
            raise
        except Exception as e:
            logger.error("Failed to start native change watching: %s", e)
            raise MonitoringError(
                f"Failed to start watching: {e}",
                path=str(directory_path),
                operation="start_watching",
                underlying_error=e,
            ) from e

    def stop_watching(self) -> None:
        """Stop the observer and forget any pending poll request."""
        try:
            if self._observer and self._observer.is_alive():
                self._observer.stop()
                self._observer.join(timeout=5.0)
                logger.info("Native change observer stopped")

            if self._pending is not None:
                self._pending.cancel()
                self._pending = None

            self._watched_paths.clear()

        except Exception as e:
            logger.error("Error stopping native change watching: %s", e)
            raise MonitoringError("Failed to stop watching", operation="stop_watching", underlying_error=e) from e

    def on_any_event(self, event: FileSystemEvent) -> None:
        """Handle every native event; runs on the observer thread."""
        if event.event_type in _IGNORED_EVENT_TYPES:
            return

        path = os.fsdecode(event.src_path)
        if self._should_ignore(path):
            logger.debug("Ignoring native event %s for %s", event.event_type, path)
            return

        logger.debug("Native event: %s %s", event.event_type, path)
        if self._loop and not self._loop.is_closed():
            self._loop.call_soon_threadsafe(self._schedule_request)
        else:
            logger.error("No event loop available to request a poll for %s", path)

    def _schedule_request(self) -> None:
        """Restart the debounce timer; runs on the event loop thread."""
        if self._pending is not None:
            self._pending.cancel()
        self._pending = self._loop.call_later(self.debounce_seconds, self._fire)

    def _fire(self) -> None:
        self._pending = None
        self._requests_sent += 1
        logger.debug("Requesting poll after native changes")
        self.target.request_poll()

    def _should_ignore(self, path: str) -> bool:
        if self.config is None or not self.config.ignored_patterns or self._root is None:
            return False
        try:
            relative = Path(path).resolve().relative_to(self._root).as_posix()
        except ValueError:
            return False
        if relative == ".":
            return False
        return self.config.should_ignore(relative)

    @property
    def is_watching(self) -> bool:
        """Check if currently watching for native changes."""
        return self._observer is not None and self._observer.is_alive()

    @property
    def has_pending_request(self) -> bool:
        return self._pending is not None

    @property
    def requests_sent(self) -> int:
        return self._requests_sent

    def get_watched_paths(self) -> list[str]:
        """Get list of currently watched directory paths."""
        return list(self._watched_paths)
