"""
Poller: keeps the baseline snapshot of a tracked root and turns each
poll cycle into a batch of diff events.

Each cycle builds a fresh snapshot, diffs it against the stored baseline,
publishes the resulting events and then replaces the baseline. A failed
build is published on the separate error channel and leaves the baseline
untouched, so the next successful cycle diffs against the last known good
state.
"""

import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Any

from dirpoll.config.settings import PollerConfig, get_config
from dirpoll.core.interfaces import IFileSystem, IPollTarget
from dirpoll.diff.differ import diff
from dirpoll.filesystem.local import LocalFileSystem
from dirpoll.models import DiffEvent, DiffKind, FilesystemError, MonitoringError, Snapshot
from dirpoll.monitoring.channel import EventChannel
from dirpoll.scanner.snapshot_builder import SnapshotBuilder

logger = logging.getLogger(__name__)


class PollerState(str, Enum):
    """Lifecycle state of a poller."""

    UNINITIALIZED = "uninitialized"
    BASELINED = "baselined"
    CLOSED = "closed"


class Poller(IPollTarget):
    """
    Orchestrates snapshot building, diffing and event delivery.

    The first successful cycle only establishes the baseline and emits no
    events. Poll cycles are serialised; consumers read the ``events()`` and
    ``errors()`` channels independently of the polling task.
    """

    def __init__(
        self,
        root_path: str | Path | None = None,
        filesystem: IFileSystem | None = None,
        config: PollerConfig | None = None,
        builder: SnapshotBuilder | None = None,
    ):
        """
        Initialize the poller.

        Args:
            root_path: Tracked root (defaults to the configured root_path)
            filesystem: Filesystem capability (defaults to the local filesystem)
            config: Poller configuration (defaults to the global configuration)
            builder: Optional snapshot builder (will create if not provided)
        """
        self.config = config or get_config()
        self.root_path = str(root_path if root_path is not None else self.config.root_path)
        self.filesystem = filesystem or LocalFileSystem(follow_symlinks=self.config.follow_symlinks)
        self.builder = builder or SnapshotBuilder(
            self.filesystem,
            should_ignore=self.config.should_ignore if self.config.ignored_patterns else None,
        )

        self._events: EventChannel[DiffEvent] = EventChannel(
            "events", self.config.channel_capacity, self.config.backpressure
        )
        self._errors: EventChannel[FilesystemError] = EventChannel(
            "errors", self.config.channel_capacity, self.config.backpressure
        )

        self._baseline: Snapshot | None = None
        self._closed = False
        self._lock = asyncio.Lock()
        self._poll_requested = asyncio.Event()

        # Statistics tracking
        self._stats: dict[str, Any] = {
            "cycles": 0,
            "failed_cycles": 0,
            "events_emitted": 0,
            "operations": {kind.value: 0 for kind in DiffKind},
            "last_error": None,
        }

    @property
    def state(self) -> PollerState:
        if self._closed:
            return PollerState.CLOSED
        if self._baseline is None:
            return PollerState.UNINITIALIZED
        return PollerState.BASELINED

    @property
    def baseline(self) -> Snapshot | None:
        """The last successfully built snapshot."""
        return self._baseline

    @property
    def is_closed(self) -> bool:
        return self._closed

    def events(self) -> EventChannel[DiffEvent]:
        """Channel carrying the diff events of every successful cycle, in order."""
        return self._events

    def errors(self) -> EventChannel[FilesystemError]:
        """Channel carrying one error per failed cycle."""
        return self._errors

    async def poll(self) -> list[DiffEvent]:
        """
        Run one poll cycle.

        Returns:
            The events published by this cycle; empty for the baseline cycle
            and for a failed cycle

        Raises:
            MonitoringError: If the poller is closed
        """
        async with self._lock:
            if self._closed:
                raise MonitoringError("Poller is closed", path=self.root_path, operation="poll")

            self._stats["cycles"] += 1
            try:
                snapshot = await asyncio.to_thread(self.builder.build, self.root_path)
            except FilesystemError as e:
                self._stats["failed_cycles"] += 1
                self._stats["last_error"] = str(e)
                logger.warning("Poll of %s failed, keeping previous baseline: %s", self.root_path, e)
                await self._errors.publish(e)
                return []

            if self._baseline is None:
                self._baseline = snapshot
                logger.info("Baseline established for %s: %d entries", self.root_path, snapshot.entry_count)
                return []

            events = diff(self._baseline, snapshot)
            counts = {kind: 0 for kind in DiffKind}
            for event in events:
                await self._events.publish(event)
                counts[event.kind] += 1
            self._baseline = snapshot

            self._update_stats(len(events), counts)
            return events

    def _update_stats(self, emitted: int, counts: dict[DiffKind, int]) -> None:
        self._stats["events_emitted"] += emitted
        for kind, count in counts.items():
            self._stats["operations"][kind.value] += count

        if emitted:
            logger.info(
                "Poll of %s: %d created, %d modified, %d deleted",
                self.root_path,
                counts[DiffKind.CREATED],
                counts[DiffKind.MODIFIED],
                counts[DiffKind.DELETED],
            )
        else:
            logger.debug("Poll of %s: no changes", self.root_path)

    def request_poll(self) -> None:
        """Wake ``run()`` so it polls without waiting for the interval."""
        self._poll_requested.set()

    async def run(self, interval: float | None = None, max_cycles: int | None = None) -> None:
        """
        Poll on a fixed interval until closed.

        Args:
            interval: Seconds between cycles (defaults to poll_interval_seconds)
            max_cycles: Optional number of cycles after which to return

        Raises:
            MonitoringError: If the poller is already closed
        """
        if self._closed:
            raise MonitoringError("Poller is closed", path=self.root_path, operation="run")

        interval = self.config.poll_interval_seconds if interval is None else interval
        logger.info("Starting poller for %s (interval: %ss)", self.root_path, interval)

        completed = 0
        try:
            while not self._closed:
                await self.poll()
                completed += 1
                if max_cycles is not None and completed >= max_cycles:
                    break

                try:
                    await asyncio.wait_for(self._poll_requested.wait(), timeout=interval)
                except TimeoutError:
                    pass
                self._poll_requested.clear()
        finally:
            logger.info("Poller for %s stopped after %d cycles", self.root_path, completed)

    def close(self) -> None:
        """
        Close both output channels and stop ``run()``. Idempotent.

        An in-flight ``poll()`` still completes and updates the baseline,
        but the closed channels refuse its events.
        """
        if self._closed:
            return

        self._closed = True
        self._events.close()
        self._errors.close()
        self._poll_requested.set()
        logger.info("Poller for %s closed", self.root_path)

    def get_stats(self) -> dict[str, Any]:
        """
        Get poller statistics.

        Returns:
            Dictionary with cycle counters and channel status
        """
        return {
            "state": self.state.value,
            "root_path": self.root_path,
            "baseline_entries": self._baseline.entry_count if self._baseline else None,
            "cycles": self._stats["cycles"],
            "failed_cycles": self._stats["failed_cycles"],
            "events_emitted": self._stats["events_emitted"],
            "operations": self._stats["operations"].copy(),
            "last_error": self._stats["last_error"],
            "channels": {
                "events": {"pending": self._events.qsize(), "dropped": self._events.dropped},
                "errors": {"pending": self._errors.qsize(), "dropped": self._errors.dropped},
            },
            "configuration": {
                "poll_interval_seconds": self.config.poll_interval_seconds,
                "channel_capacity": self.config.channel_capacity,
                "backpressure": self.config.backpressure.value,
            },
        }
