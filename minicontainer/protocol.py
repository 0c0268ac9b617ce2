"""Control-plane messages exchanged between the CLI and the supervisor."""

from __future__ import annotations

import json
import re
import socket
import struct
from dataclasses import asdict, dataclass, replace
from enum import IntEnum, StrEnum
from collections.abc import Sequence

CONTROL_PATH = "/tmp/mini_runtime.sock"
LOG_DIR = "logs"
CONTAINER_ID_LEN = 32
CONTROL_MESSAGE_LEN = 256
CHILD_COMMAND_LEN = 256
PATH_MAX = 4096
MIB = 1 << 20
DEFAULT_SOFT_LIMIT = 40 * MIB
DEFAULT_HARD_LIMIT = 64 * MIB
ULONG_MAX = (1 << 64) - 1
NICE_MIN = -20
NICE_MAX = 19

_HEADER = struct.Struct("!I")
_UNSIGNED = re.compile(r"\s*\+?(\d+)")
_SIGNED = re.compile(r"\s*([+-]?\d+)")


class CommandKind(IntEnum):
    SUPERVISOR = 0
    START = 1
    RUN = 2
    PS = 3
    LOGS = 4
    STOP = 5


class ContainerState(StrEnum):
    STARTING = "starting"
    RUNNING = "running"
    STOPPED = "stopped"
    KILLED = "killed"
    EXITED = "exited"


class UsageError(Exception):
    """A command line that cannot be turned into a valid request."""


@dataclass
class ControlRequest:
    """A request from the CLI to the supervisor."""

    kind: CommandKind | int
    container_id: str = ""
    rootfs: str = ""
    command: str = ""
    soft_limit_bytes: int = 0
    hard_limit_bytes: int = 0
    nice_value: int = 0

    def __post_init__(self) -> None:
        self.container_id = self.container_id[: CONTAINER_ID_LEN - 1]
        self.rootfs = self.rootfs[: PATH_MAX - 1]
        self.command = self.command[: CHILD_COMMAND_LEN - 1]

    def encode(self) -> bytes:
        fields = asdict(self)
        fields["kind"] = int(self.kind)
        return json.dumps(fields).encode("utf-8")

    @classmethod
    def decode(cls, data: bytes) -> ControlRequest:
        fields = _load_object(data)
        try:
            raw_kind = int(fields.pop("kind"))
            try:
                kind: CommandKind | int = CommandKind(raw_kind)
            except ValueError:
                kind = raw_kind
            return cls(
                kind=kind,
                container_id=str(fields.get("container_id", "")),
                rootfs=str(fields.get("rootfs", "")),
                command=str(fields.get("command", "")),
                soft_limit_bytes=int(fields.get("soft_limit_bytes", 0)),
                hard_limit_bytes=int(fields.get("hard_limit_bytes", 0)),
                nice_value=int(fields.get("nice_value", 0)),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed control request: {exc}") from exc


@dataclass
class ControlResponse:
    """The supervisor's reply: a status and a short human-readable message."""

    status: int
    message: str = ""

    def __post_init__(self) -> None:
        self.message = self.message[: CONTROL_MESSAGE_LEN - 1]

    def encode(self) -> bytes:
        return json.dumps({"status": self.status, "message": self.message}).encode("utf-8")

    @classmethod
    def decode(cls, data: bytes) -> ControlResponse:
        fields = _load_object(data)
        try:
            return cls(status=int(fields["status"]), message=str(fields.get("message", "")))
        except (KeyError, TypeError) as exc:
            raise ValueError(f"malformed control response: {exc}") from exc


def _load_object(data: bytes) -> dict:
    value = json.loads(data.decode("utf-8"))
    if not isinstance(value, dict):
        raise ValueError("control message must be an object")
    return value


def parse_mib(flag: str, value: str) -> int:
    """Convert a MiB count given for ``flag`` into bytes."""
    match = _UNSIGNED.fullmatch(value)
    mib = int(match.group(1)) if match else None
    if mib is None or mib > ULONG_MAX:
        raise UsageError(f"Invalid value for {flag}: {value}")
    if mib > ULONG_MAX // MIB:
        raise UsageError(f"Value for {flag} is too large: {value}")
    return mib * MIB


def _parse_nice(value: str) -> int:
    match = _SIGNED.fullmatch(value)
    if match is None or not NICE_MIN <= int(match.group(1)) <= NICE_MAX:
        raise UsageError(f"Invalid value for --nice (expected -20..19): {value}")
    return int(match.group(1))


def parse_optional_flags(request: ControlRequest, args: Sequence[str]) -> ControlRequest:
    """Apply ``--soft-mib``, ``--hard-mib`` and ``--nice`` pairs; return the new request."""
    updated = replace(request)
    args = list(args)
    for position in range(0, len(args), 2):
        option = args[position]
        if position + 1 >= len(args):
            raise UsageError(f"Missing value for option: {option}")
        value = args[position + 1]
        match option:
            case "--soft-mib":
                updated.soft_limit_bytes = parse_mib("--soft-mib", value)
            case "--hard-mib":
                updated.hard_limit_bytes = parse_mib("--hard-mib", value)
            case "--nice":
                updated.nice_value = _parse_nice(value)
            case _:
                raise UsageError(f"Unknown option: {option}")

    if updated.soft_limit_bytes > updated.hard_limit_bytes:
        raise UsageError("Invalid limits: soft limit cannot exceed hard limit")
    return updated


def send_message(sock: socket.socket, payload: bytes) -> None:
    """Send one length-prefixed message."""
    sock.sendall(_HEADER.pack(len(payload)) + payload)


def _recv_exactly(sock: socket.socket, size: int) -> bytes:
    chunks = bytearray()
    while len(chunks) < size:
        chunk = sock.recv(size - len(chunks))
        if not chunk:
            break
        chunks += chunk
    return bytes(chunks)


def recv_message(sock: socket.socket) -> bytes | None:
    """Receive one length-prefixed message, or None if the peer closed cleanly."""
    header = _recv_exactly(sock, _HEADER.size)
    if not header:
        return None
    if len(header) < _HEADER.size:
        raise ConnectionError("connection closed inside a message header")
    (length,) = _HEADER.unpack(header)
    payload = _recv_exactly(sock, length)
    if len(payload) < length:
        raise ConnectionError("connection closed inside a message body")
    return payload