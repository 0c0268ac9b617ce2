import io

import pytest

from minicontainer import memory_hog


@pytest.mark.parametrize(
    ("arg", "expected"),
    [("16", 16), ("0", 8), ("", 8), (None, 8), ("4mb", 8)],
)
def test_parse_size_mb(arg, expected):
    assert memory_hog.parse_size_mb(arg, 8) == expected


@pytest.mark.parametrize(
    ("arg", "expected"),
    [("250", 250), ("0", 0), ("", 1000), (None, 1000), ("fast", 1000)],
)
def test_parse_sleep_ms(arg, expected):
    assert memory_hog.parse_sleep_ms(arg, 1000) == expected


def test_hog_stops_at_limit_and_reports_totals():
    out = io.StringIO()
    assert memory_hog.hog(1, 0, out, max_allocations=3) == 3
    assert out.getvalue().splitlines() == [
        "allocation=1 chunk=1MB total=1MB",
        "allocation=2 chunk=1MB total=2MB",
        "allocation=3 chunk=1MB total=3MB",
    ]


def test_hog_total_grows_by_chunk():
    out = io.StringIO()
    count = memory_hog.hog(2, 0, out, max_allocations=2)
    last = out.getvalue().splitlines()[-1]
    assert last == f"allocation={count} chunk=2MB total={count * 2}MB"


def test_hog_zero_allocations():
    out = io.StringIO()
    assert memory_hog.hog(1, 0, out, max_allocations=0) == 0
    assert out.getvalue() == ""