"""Periodic memory monitor enforcing soft and hard RSS limits per process."""

from __future__ import annotations

import dataclasses
import logging
import os
import signal
import threading
from collections.abc import Callable
from dataclasses import dataclass

log = logging.getLogger(__name__)

CHECK_INTERVAL_SEC = 1.0
CONTAINER_ID_LEN = 32
_PAGE_SIZE = os.sysconf("SC_PAGE_SIZE")


def read_rss_bytes(pid: int) -> int | None:
    """Return the resident set size of ``pid`` in bytes, or None if it is gone."""
    try:
        with open(f"/proc/{pid}/statm", encoding="ascii") as handle:
            fields = handle.read().split()
    except (FileNotFoundError, ProcessLookupError):
        return None
    if len(fields) < 2:
        return 0
    return int(fields[1]) * _PAGE_SIZE


def _send_sigkill(pid: int) -> None:
    try:
        os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


@dataclass
class MonitoredEntry:
    """One tracked process and its limits."""

    pid: int
    container_id: str
    soft_limit_bytes: int
    hard_limit_bytes: int
    soft_limit_logged: bool = False


class MemoryMonitor:
    """Tracks registered processes and acts when they exceed their limits."""

    def __init__(
        self,
        rss_reader: Callable[[int], int | None] = read_rss_bytes,
        killer: Callable[[int], None] = _send_sigkill,
        interval: float = CHECK_INTERVAL_SEC,
    ) -> None:
        self._rss_reader = rss_reader
        self._killer = killer
        self._interval = interval
        self._entries: list[MonitoredEntry] = []
        self._lock = threading.Lock()
        self._stopping = threading.Event()
        self._thread: threading.Thread | None = None

    def register(
        self, pid: int, container_id: str, soft_limit_bytes: int, hard_limit_bytes: int
    ) -> None:
        log.info(
            "[container_monitor] Registering container=%s pid=%d soft=%d hard=%d",
            container_id, pid, soft_limit_bytes, hard_limit_bytes,
        )
        if soft_limit_bytes > hard_limit_bytes:
            raise ValueError("soft limit cannot exceed hard limit")
        entry = MonitoredEntry(
            pid, container_id[: CONTAINER_ID_LEN - 1], soft_limit_bytes, hard_limit_bytes
        )
        with self._lock:
            self._entries.insert(0, entry)

    def unregister(self, pid: int, container_id: str) -> None:
        log.info(
            "[container_monitor] Unregister request container=%s pid=%d", container_id, pid
        )
        name = container_id[: CONTAINER_ID_LEN - 1]
        with self._lock:
            for entry in self._entries:
                if entry.pid == pid and entry.container_id == name:
                    self._entries.remove(entry)
                    return
        raise LookupError(f"no monitored entry for container={container_id} pid={pid}")

    def check(self) -> None:
        """Run one pass over all entries, warning, killing and pruning as needed."""
        with self._lock:
            kept: list[MonitoredEntry] = []
            for entry in self._entries:
                rss = self._rss_reader(entry.pid)
                if rss is None:
                    continue
                if rss > entry.soft_limit_bytes and not entry.soft_limit_logged:
                    log.warning(
                        "[container_monitor] SOFT LIMIT container=%s pid=%d rss=%d limit=%d",
                        entry.container_id, entry.pid, rss, entry.soft_limit_bytes,
                    )
                    entry.soft_limit_logged = True
                if rss > entry.hard_limit_bytes:
                    self._killer(entry.pid)
                    log.warning(
                        "[container_monitor] HARD LIMIT container=%s pid=%d rss=%d limit=%d",
                        entry.container_id, entry.pid, rss, entry.hard_limit_bytes,
                    )
                    continue
                kept.append(entry)
            self._entries = kept

    def entries(self) -> list[MonitoredEntry]:
        """Return copies of the tracked entries, newest first."""
        with self._lock:
            return [dataclasses.replace(entry) for entry in self._entries]

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stopping.clear()
        self._thread = threading.Thread(target=self._run, name="memory-monitor", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        """Stop the periodic checks and forget every tracked entry."""
        self._stopping.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        with self._lock:
            self._entries.clear()

    def _run(self) -> None:
        while not self._stopping.wait(self._interval):
            self.check()