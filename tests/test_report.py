from __future__ import annotations

from datetime import datetime

from memtop.report import (
    SEPARATOR,
    TRUNCATION_MARKER,
    format_sample,
    format_size,
    render_round,
    summary_lines,
    truncate_line,
)
from memtop.tracker import PeakObservation, ProcessSample

T0 = datetime(2026, 10, 17, 9, 30, 5)


def test_format_size_units():
    assert format_size(512) == "512.00K"
    assert format_size(1023) == "1023.00K"
    assert format_size(1024) == "1.00M"
    assert format_size(2048) == "2.00M"
    assert format_size(1048576) == "1.00G"
    assert format_size(3 * 1024 ** 3) == "3072.00G"
    assert format_size(0) == "0.00K"


def test_truncate_line_boundary():
    line = "x" * 80
    assert truncate_line(line, 80) == line

    long_line = "y" * 81
    truncated = truncate_line(long_line, 80)
    assert len(truncated) == 80
    assert truncated == "y" * 79 + TRUNCATION_MARKER


def test_format_sample_layout():
    s = ProcessSample(pid=1, resident_size=2048, command_line="/sbin/init splash", sampled_at=T0)

    assert format_sample(s, 80) == "2026-10-17 09:30:05 2.00M /sbin/init splash"
    assert len(format_sample(s, 20)) == 20


def test_summary_lines():
    peak = PeakObservation(value=1048576, recorded_at=T0)

    assert summary_lines(peak, T0) == [
        "",
        "max mem used: 1.00G at: 2026-10-17 09:30:05",
        "since: 2026-10-17 09:30:05",
    ]


def test_summary_before_any_peak():
    assert summary_lines(PeakObservation(), T0)[1] == "max mem used: 0.00K at: -"


def test_render_round_orders_process_lines_then_summary():
    ranked = [
        ProcessSample(pid=2, resident_size=4096, command_line="big", sampled_at=T0),
        ProcessSample(pid=1, resident_size=10, command_line="small", sampled_at=T0),
    ]
    lines = render_round(ranked, PeakObservation(4106, T0), T0, 80, "%H:%M:%S")

    assert lines == [
        "09:30:05 4.00M big",
        "09:30:05 10.00K small",
        "",
        "max mem used: 4.01M at: 09:30:05",
        "since: 09:30:05",
    ]
    assert len(SEPARATOR) == 50


def test_empty_command_line_has_no_trailing_space():
    s = ProcessSample(pid=3, resident_size=1024, command_line="", sampled_at=T0)

    assert format_sample(s, 80, "%H:%M:%S") == "09:30:05 1.00M"
