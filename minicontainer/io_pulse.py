"""I/O-oriented workload: small synced writes separated by sleeps."""

from __future__ import annotations

import os
import re
import sys
import time
from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

DEFAULT_OUTPUT = "/tmp/io_pulse.out"
DEFAULT_ITERATIONS = 20
DEFAULT_SLEEP_MS = 200
_UNSIGNED = re.compile(r"\s*\+?(\d+)")


def parse_uint(arg: str | None, fallback: int) -> int:
    """Parse a positive integer, or return ``fallback``."""
    if not arg:
        return fallback
    match = _UNSIGNED.fullmatch(arg)
    if match is None:
        return fallback
    value = int(match.group(1))
    return value if value else fallback


def pulse(
    iterations: int,
    sleep_ms: int,
    output_path: str | os.PathLike[str] = DEFAULT_OUTPUT,
    out: TextIO | None = None,
) -> None:
    """Write ``iterations`` lines to ``output_path``, syncing after each one."""
    out = sys.stdout if out is None else out
    with open(Path(output_path), "w", encoding="ascii") as handle:
        for number in range(1, iterations + 1):
            handle.write(f"io_pulse iteration={number}\n")
            handle.flush()
            os.fsync(handle.fileno())
            print(f"io_pulse wrote iteration={number}", file=out, flush=True)
            time.sleep(sleep_ms / 1000)


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    iterations = parse_uint(args[0], DEFAULT_ITERATIONS) if len(args) > 0 else DEFAULT_ITERATIONS
    sleep_ms = parse_uint(args[1], DEFAULT_SLEEP_MS) if len(args) > 1 else DEFAULT_SLEEP_MS
    try:
        pulse(iterations, sleep_ms, DEFAULT_OUTPUT)
    except OSError as exc:
        print(f"io_pulse: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())