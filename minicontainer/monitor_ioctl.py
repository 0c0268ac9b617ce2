"""Request layout and ioctl numbers for the container memory monitor device."""

from __future__ import annotations

import fcntl
import struct
from dataclasses import dataclass
from typing import ClassVar

MONITOR_NAME_LEN = 32
MONITOR_MAGIC = "M"
MONITOR_DEVICE = "/dev/container_monitor"

_IOC_WRITE = 1
_IOC_NRSHIFT = 0
_IOC_TYPESHIFT = 8
_IOC_SIZESHIFT = 16
_IOC_DIRSHIFT = 30


def ioc_write(magic: str | int, number: int, size: int) -> int:
    """Build a write-direction ioctl request number."""
    kind = ord(magic) if isinstance(magic, str) else magic
    return (
        (_IOC_WRITE << _IOC_DIRSHIFT)
        | (size << _IOC_SIZESHIFT)
        | (kind << _IOC_TYPESHIFT)
        | (number << _IOC_NRSHIFT)
    )


@dataclass(frozen=True)
class MonitorRequest:
    """A registration or unregistration request for one container process."""

    pid: int
    container_id: str
    soft_limit_bytes: int = 0
    hard_limit_bytes: int = 0

    FORMAT: ClassVar[struct.Struct] = struct.Struct(f"@iLL{MONITOR_NAME_LEN}s")

    def pack(self) -> bytes:
        name = self.container_id.encode("utf-8")[: MONITOR_NAME_LEN - 1]
        return self.FORMAT.pack(self.pid, self.soft_limit_bytes, self.hard_limit_bytes, name)

    @classmethod
    def unpack(cls, data: bytes) -> MonitorRequest:
        pid, soft, hard, raw_name = cls.FORMAT.unpack(data)
        name = raw_name.split(b"\0", 1)[0].decode("utf-8", errors="replace")
        return cls(pid=pid, container_id=name, soft_limit_bytes=soft, hard_limit_bytes=hard)


MONITOR_REGISTER = ioc_write(MONITOR_MAGIC, 1, MonitorRequest.FORMAT.size)
MONITOR_UNREGISTER = ioc_write(MONITOR_MAGIC, 2, MonitorRequest.FORMAT.size)


def register_with_monitor(
    device_fd: int,
    container_id: str,
    pid: int,
    soft_limit_bytes: int,
    hard_limit_bytes: int,
) -> None:
    """Ask the monitor device to track ``pid``; raises OSError on failure."""
    request = MonitorRequest(pid, container_id, soft_limit_bytes, hard_limit_bytes)
    fcntl.ioctl(device_fd, MONITOR_REGISTER, request.pack())


def unregister_from_monitor(device_fd: int, container_id: str, pid: int) -> None:
    """Ask the monitor device to stop tracking ``pid``; raises OSError on failure."""
    request = MonitorRequest(pid, container_id)
    fcntl.ioctl(device_fd, MONITOR_UNREGISTER, request.pack())