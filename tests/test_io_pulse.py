import io

import pytest

from minicontainer import io_pulse


@pytest.mark.parametrize(
    ("arg", "expected"),
    [("3", 3), ("0", 20), ("", 20), (None, 20), ("x1", 20), ("12 ", 20)],
)
def test_parse_uint(arg, expected):
    assert io_pulse.parse_uint(arg, 20) == expected


def test_pulse_writes_file_and_reports(tmp_path):
    target = tmp_path / "out.txt"
    out = io.StringIO()
    io_pulse.pulse(3, 0, target, out)
    assert target.read_text().splitlines() == [
        "io_pulse iteration=1",
        "io_pulse iteration=2",
        "io_pulse iteration=3",
    ]
    assert out.getvalue().splitlines() == [
        "io_pulse wrote iteration=1",
        "io_pulse wrote iteration=2",
        "io_pulse wrote iteration=3",
    ]


def test_pulse_truncates_existing_file(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old content that is long\n" * 10)
    io_pulse.pulse(1, 0, target, io.StringIO())
    assert target.read_text() == "io_pulse iteration=1\n"


def test_pulse_unwritable_path_raises(tmp_path):
    with pytest.raises(OSError):
        io_pulse.pulse(1, 0, tmp_path / "missing" / "out.txt", io.StringIO())


def test_main_uses_default_output(tmp_path, monkeypatch, capsys):
    target = tmp_path / "pulse.out"
    monkeypatch.setattr(io_pulse, "DEFAULT_OUTPUT", str(target))
    assert io_pulse.main(["2", "1"]) == 0
    assert len(target.read_text().splitlines()) == 2
    assert capsys.readouterr().out.splitlines()[-1] == "io_pulse wrote iteration=2"


def test_main_reports_open_failure(tmp_path, monkeypatch):
    monkeypatch.setattr(io_pulse, "DEFAULT_OUTPUT", str(tmp_path / "nope" / "x"))
    assert io_pulse.main(["1", "1"]) == 1