import logging
import os
import threading

import pytest

from minicontainer.monitor import MemoryMonitor, read_rss_bytes


class FakeProcesses:
    def __init__(self):
        self.rss = {}
        self.killed = []

    def read(self, pid):
        return self.rss.get(pid)

    def kill(self, pid):
        self.killed.append(pid)


@pytest.fixture
def procs():
    return FakeProcesses()


@pytest.fixture
def monitor(procs):
    return MemoryMonitor(rss_reader=procs.read, killer=procs.kill, interval=0.01)


def test_register_rejects_soft_above_hard(monitor):
    with pytest.raises(ValueError):
        monitor.register(1, "a", 200, 100)
    assert monitor.entries() == []


def test_newest_entry_first(monitor):
    monitor.register(1, "a", 10, 20)
    monitor.register(2, "b", 10, 20)
    assert [e.container_id for e in monitor.entries()] == ["b", "a"]


def test_unregister_matches_pid_and_id(monitor):
    monitor.register(1, "a", 10, 20)
    with pytest.raises(LookupError):
        monitor.unregister(1, "b")
    monitor.unregister(1, "a")
    assert monitor.entries() == []
    with pytest.raises(LookupError):
        monitor.unregister(1, "a")


def test_soft_limit_warns_once(monitor, procs, caplog):
    procs.rss[5] = 150
    monitor.register(5, "soft", 100, 1000)
    with caplog.at_level(logging.WARNING, logger="minicontainer.monitor"):
        monitor.check()
        monitor.check()
    soft = [r for r in caplog.records if "SOFT LIMIT" in r.getMessage()]
    assert len(soft) == 1
    assert "container=soft pid=5" in soft[0].getMessage()
    assert monitor.entries()[0].soft_limit_logged is True
    assert procs.killed == []


def test_hard_limit_kills_and_removes(monitor, procs, caplog):
    procs.rss[7] = 5000
    procs.rss[8] = 10
    monitor.register(7, "big", 100, 1000)
    monitor.register(8, "small", 100, 1000)
    with caplog.at_level(logging.WARNING, logger="minicontainer.monitor"):
        monitor.check()
    assert procs.killed == [7]
    assert [e.pid for e in monitor.entries()] == [8]
    assert any("HARD LIMIT container=big" in r.getMessage() for r in caplog.records)


def test_exited_process_removed(monitor, procs):
    monitor.register(9, "gone", 10, 20)
    monitor.check()
    assert monitor.entries() == []
    assert procs.killed == []


def test_at_limit_is_not_exceeding(monitor, procs):
    procs.rss[3] = 100
    monitor.register(3, "edge", 100, 100)
    monitor.check()
    entry = monitor.entries()[0]
    assert entry.soft_limit_logged is False
    assert procs.killed == []


def test_entries_are_copies(monitor):
    monitor.register(1, "a", 10, 20)
    monitor.entries()[0].soft_limit_logged = True
    assert monitor.entries()[0].soft_limit_logged is False


def test_background_thread_enforces_limits():
    killed = threading.Event()
    mon = MemoryMonitor(rss_reader=lambda pid: 10_000, killer=lambda pid: killed.set(), interval=0.01)
    mon.register(11, "bg", 100, 1000)
    mon.start()
    try:
        assert killed.wait(5)
    finally:
        mon.stop()
    assert mon.entries() == []


def test_stop_clears_entries(monitor, procs):
    procs.rss[1] = 1
    monitor.register(1, "a", 10, 20)
    monitor.start()
    monitor.stop()
    assert monitor.entries() == []


def test_read_rss_of_self_is_positive():
    assert read_rss_bytes(os.getpid()) > 0


def test_read_rss_of_missing_process():
    assert read_rss_bytes(999_999_999) is None