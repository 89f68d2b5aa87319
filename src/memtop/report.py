"""Rendering of a round's ranking and summary block."""
from __future__ import annotations

from datetime import datetime

from .tracker import PeakObservation, ProcessSample

SEPARATOR = "-" * 50
TRUNCATION_MARKER = "…"
DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_UNITS = ("K", "M", "G")


def format_size(kb: int | float) -> str:
    value = float(kb)
    for unit in _UNITS[:-1]:
        if value < 1024:
            return f"{value:.2f}{unit}"
        value /= 1024
    return f"{value:.2f}{_UNITS[-1]}"


def truncate_line(line: str, max_len: int) -> str:
    if len(line) <= max_len:
        return line
    return line[: max_len - 1] + TRUNCATION_MARKER


def _stamp(moment: datetime | None, fmt: str) -> str:
    return moment.strftime(fmt) if moment is not None else "-"


def format_sample(sample: ProcessSample, max_len: int, fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
    line = f"{_stamp(sample.sampled_at, fmt)} {format_size(sample.resident_size)} {sample.command_line}".rstrip()
    return truncate_line(line, max_len)


def summary_lines(peak: PeakObservation, since: datetime, fmt: str = DEFAULT_TIMESTAMP_FORMAT) -> list[str]:
    return [
        "",
        f"max mem used: {format_size(peak.value)} at: {_stamp(peak.recorded_at, fmt)}",
        f"since: {_stamp(since, fmt)}",
    ]


def render_round(
    ranked: list[ProcessSample],
    peak: PeakObservation,
    since: datetime,
    max_len: int,
    fmt: str = DEFAULT_TIMESTAMP_FORMAT,
) -> list[str]:
    """Lines shared by stdout and snapshot files; stdout adds SEPARATOR above."""
    lines: list[str] = []
    lines.extend(format_sample(sample, max_len, fmt) for sample in ranked)
    lines.extend(summary_lines(peak, since, fmt))
    return lines
