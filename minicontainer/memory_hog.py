"""Memory-pressure workload that keeps allocating and touching chunks."""

from __future__ import annotations

import re
import sys
import time
from collections.abc import Sequence
from typing import TextIO

DEFAULT_CHUNK_MB = 8
DEFAULT_SLEEP_MS = 1000
# An unparsable sleep argument falls back to a 1 ms pause.
INVALID_SLEEP_FALLBACK_MS = 1
_UNSIGNED = re.compile(r"\s*\+?(\d+)")


def _parse_unsigned(arg: str | None) -> int | None:
    if not arg:
        return None
    match = _UNSIGNED.fullmatch(arg)
    return int(match.group(1)) if match else None


def parse_size_mb(arg: str | None, fallback: int) -> int:
    """Parse a positive chunk size in MiB, or return ``fallback``."""
    value = _parse_unsigned(arg)
    return value if value else fallback


def parse_sleep_ms(arg: str | None, fallback: int) -> int:
    """Parse a sleep in milliseconds (zero allowed), or return ``fallback``."""
    value = _parse_unsigned(arg)
    return fallback if value is None else value


def hog(
    chunk_mb: int,
    sleep_ms: int,
    out: TextIO | None = None,
    max_allocations: int | None = None,
) -> int:
    """Allocate and fill ``chunk_mb`` MiB at a time; return the allocation count.

    Runs until allocation fails, or until ``max_allocations`` chunks are held.
    """
    out = sys.stdout if out is None else out
    chunk_bytes = chunk_mb * 1024 * 1024
    held: list[bytearray] = []

    while max_allocations is None or len(held) < max_allocations:
        try:
            chunk = bytearray(b"A") * chunk_bytes
        except MemoryError:
            print(f"malloc failed after {len(held)} allocations", file=out, flush=True)
            break
        held.append(chunk)
        count = len(held)
        print(
            f"allocation={count} chunk={chunk_mb}MB total={count * chunk_mb}MB",
            file=out,
            flush=True,
        )
        time.sleep(sleep_ms / 1000)

    return len(held)


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    chunk_mb = parse_size_mb(args[0], DEFAULT_CHUNK_MB) if len(args) > 0 else DEFAULT_CHUNK_MB
    if len(args) > 1:
        sleep_ms = parse_sleep_ms(args[1], INVALID_SLEEP_FALLBACK_MS)
    else:
        sleep_ms = DEFAULT_SLEEP_MS
    hog(chunk_mb, sleep_ms)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())