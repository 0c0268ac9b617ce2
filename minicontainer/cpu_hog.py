"""CPU-bound workload that reports progress once per second."""

from __future__ import annotations

import re
import sys
import time
from collections.abc import Callable, Sequence
from typing import TextIO

DEFAULT_SECONDS = 10
_MASK64 = (1 << 64) - 1
_UNSIGNED = re.compile(r"\s*\+?(\d+)")


def parse_seconds(arg: str | None, fallback: int) -> int:
    """Parse a positive whole number of seconds, or return ``fallback``."""
    if not arg:
        return fallback
    match = _UNSIGNED.fullmatch(arg)
    if match is None:
        return fallback
    value = int(match.group(1))
    return value if value else fallback


def _wall_clock() -> int:
    return int(time.time())


def burn(
    duration: int,
    out: TextIO | None = None,
    clock: Callable[[], int] = _wall_clock,
) -> int:
    """Spin for ``duration`` seconds of ``clock`` and return the accumulator."""
    out = sys.stdout if out is None else out
    start = clock()
    last_report = start
    accumulator = 0

    while clock() - start < duration:
        accumulator = (accumulator * 1664525 + 1013904223) & _MASK64
        now = clock()
        if now != last_report:
            last_report = now
            print(
                f"cpu_hog alive elapsed={last_report - start} accumulator={accumulator}",
                file=out,
                flush=True,
            )

    print(f"cpu_hog done duration={duration} accumulator={accumulator}", file=out, flush=True)
    return accumulator


def main(argv: Sequence[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else list(argv)
    duration = parse_seconds(args[0], DEFAULT_SECONDS) if args else DEFAULT_SECONDS
    burn(duration)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())