"""Filesystem watcher — turns watchdog events into coarse change signals.

The observer runs on its own thread; every event is handed to the event loop
and consumed by a single task. Events arriving within ``BATCH_WINDOW`` of each
other form one batch, and each batch publishes one ``ChangeSignal.UPDATE``.
The served root is scheduled recursively, so watchdog also subscribes
directories created after startup.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.polling import PollingObserver

from treeserve.services.broadcast import ChangeSignal

if TYPE_CHECKING:
    from treeserve.services.broadcast import BroadcastHub

logger = logging.getLogger(__name__)

CHANGE_EVENT_TYPES = frozenset({
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
})


class _LoopForwarder(FileSystemEventHandler):
    """Runs on the observer thread; forwards events into the asyncio queue."""

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue):
        self._loop = loop
        self._queue = queue

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type not in CHANGE_EVENT_TYPES:
            return
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            # Loop already closed during shutdown.
            pass


class DirectoryWatcher:
    """Keeps the served tree under observation and feeds the broadcast hub."""

    JOIN_TIMEOUT = 5  # seconds
    BATCH_WINDOW = 0.1  # seconds

    def __init__(self, root: str, hub: BroadcastHub, use_polling: bool = False):
        self._root = root
        self._hub = hub
        self._use_polling = use_polling
        self._observer = None
        self._events: asyncio.Queue[FileSystemEvent] | None = None
        self._task: asyncio.Task | None = None
        self._watched: set[str] = set()

    @property
    def is_running(self) -> bool:
        return self._observer is not None and self._task is not None

    @property
    def watched_directories(self) -> int:
        return len(self._watched)

    def start(self) -> None:
        """Subscribe the whole tree and start consuming events.

        Must be called from inside the running event loop.
        """
        if self._task is not None:
            return
        loop = asyncio.get_running_loop()
        self._events = asyncio.Queue()
        self._watched = self._walk_tree()

        observer = PollingObserver() if self._use_polling else Observer()
        try:
            observer.schedule(_LoopForwarder(loop, self._events), self._root, recursive=True)
            observer.start()
        except OSError as e:
            logger.error("Failed to watch %s, live updates disabled: %s", self._root, e)
            return

        self._observer = observer
        self._task = asyncio.create_task(self._run_loop())
        logger.info("Watching %s (%d directories)", self._root, len(self._watched))

    async def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            await asyncio.to_thread(self._observer.join, self.JOIN_TIMEOUT)
            self._observer = None
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Directory watcher stopped")

    def _walk_tree(self) -> set[str]:
        def _on_error(err: OSError) -> None:
            logger.warning("Error walking path %s: %s", err.filename, err)

        found = {self._root}
        for dirpath, dirnames, _ in os.walk(self._root, onerror=_on_error):
            for name in dirnames:
                found.add(os.path.join(dirpath, name))
        return found

    def handle_event(self, event: FileSystemEvent) -> ChangeSignal:
        """Track directory membership for one event and return the signal to emit."""
        if event.is_directory:
            if event.event_type == EVENT_TYPE_CREATED:
                self._track(event.src_path)
            elif event.event_type == EVENT_TYPE_DELETED:
                self._untrack(event.src_path)
            elif event.event_type == EVENT_TYPE_MOVED:
                self._untrack(event.src_path)
                self._track(event.dest_path)
        return ChangeSignal.UPDATE

    def _track(self, path: str | bytes) -> None:
        path = os.fsdecode(path)
        if path not in self._watched:
            self._watched.add(path)
            logger.debug("New directory under watch: %s", path)

    def _untrack(self, path: str | bytes) -> None:
        path = os.fsdecode(path)
        prefix = path + os.sep
        self._watched = {p for p in self._watched if p != path and not p.startswith(prefix)}

    async def _run_loop(self) -> None:
        assert self._events is not None
        while True:
            batch = [await self._events.get()]
            # A single mkdir or write surfaces as several events
            await asyncio.sleep(self.BATCH_WINDOW)
            while not self._events.empty():
                batch.append(self._events.get_nowait())

            signal = ChangeSignal.UPDATE
            for event in batch:
                try:
                    signal = self.handle_event(event)
                except Exception as e:
                    logger.error("Watcher error on %s: %s", event.src_path, e)
            self._hub.publish(signal)
