"""Bounded producer/consumer buffer that carries container output to log files."""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from dataclasses import dataclass
from pathlib import Path

log = logging.getLogger(__name__)

LOG_CHUNK_SIZE = 4096
LOG_BUFFER_CAPACITY = 16
CONTAINER_ID_LEN = 32


@dataclass(frozen=True)
class LogItem:
    """One chunk of output produced by a container."""

    container_id: str
    data: bytes


class BufferShutdown(Exception):
    """Raised when the buffer is shutting down and cannot serve the call."""


class BoundedBuffer:
    """A fixed-capacity FIFO shared by pipe readers and the log writer."""

    def __init__(self, capacity: int = LOG_BUFFER_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: deque[LogItem] = deque()
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._shutting_down = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def shutting_down(self) -> bool:
        with self._lock:
            return self._shutting_down

    def push(self, item: LogItem) -> None:
        """Append ``item``, blocking while full; raise BufferShutdown once shut down."""
        with self._lock:
            while len(self._items) == self._capacity and not self._shutting_down:
                self._not_full.wait()
            if self._shutting_down:
                raise BufferShutdown("buffer is shutting down")
            self._items.append(item)
            self._not_empty.notify()

    def pop(self) -> LogItem:
        """Remove the oldest item, blocking while empty.

        Raises BufferShutdown only when shutdown has begun and nothing is left.
        """
        with self._lock:
            while not self._items and not self._shutting_down:
                self._not_empty.wait()
            if not self._items:
                raise BufferShutdown("buffer is drained and shutting down")
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def begin_shutdown(self) -> None:
        """Wake every waiter; further pushes fail and pops drain what remains."""
        with self._lock:
            self._shutting_down = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


def drain_to_files(buffer: BoundedBuffer, log_dir: str | os.PathLike[str]) -> int:
    """Append each popped chunk to ``<log_dir>/<id>.log`` until the buffer is drained.

    Returns the number of chunks written.
    """
    directory = Path(log_dir)
    written = 0
    while True:
        try:
            item = buffer.pop()
        except BufferShutdown:
            return written
        path = directory / f"{item.container_id}.log"
        try:
            with open(path, "ab") as handle:
                handle.write(item.data)
        except OSError as exc:
            log.error("logging_thread: open log file %s: %s", path, exc)
            continue
        written += 1


def pump_pipe(
    fd: int,
    buffer: BoundedBuffer,
    container_id: str,
    chunk_size: int = LOG_CHUNK_SIZE,
) -> int:
    """Read ``fd`` until end of file, pushing each chunk; close ``fd`` afterwards.

    Chunks arriving after shutdown are dropped. Returns the number pushed.
    """
    name = container_id[: CONTAINER_ID_LEN - 1]
    pushed = 0
    try:
        while chunk := os.read(fd, chunk_size):
            try:
                buffer.push(LogItem(name, chunk))
            except BufferShutdown:
                continue
            pushed += 1
    finally:
        os.close(fd)
    return pushed