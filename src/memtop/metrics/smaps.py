"""Per-process memory summary read from /proc/<pid>/smaps."""
from __future__ import annotations

import os
import re
from typing import Iterable

SUMMARY_FIELDS = (
    "KernelPageSize",
    "MMUPageSize",
    "Private_Clean",
    "Private_Dirty",
    "Pss",
    "Referenced",
    "Rss",
    "Shared_Clean",
    "Shared_Dirty",
    "Size",
    "Swap",
)

# Reported per mapping but constant for the process.
SINGLETON_FIELDS = frozenset({"KernelPageSize", "MMUPageSize"})

_HEADER_RE = re.compile(r"^[0-9a-fA-F]+-[0-9a-fA-F]+\s+\S{4}\s")
_FIELD_RE = re.compile(r"^(?P<name>[A-Za-z][A-Za-z0-9_]*):\s+(?P<value>\d+)(?:\s+(?P<unit>[kKmMgG]B))?\s*$")


class SummaryError(Exception):
    def __init__(self, pid: int, message: str) -> None:
        super().__init__(f"pid {pid}: {message}")
        self.pid = pid


class NotFoundError(SummaryError):
    pass


class ParseError(SummaryError):
    pass


class SummaryReadError(SummaryError):
    pass


def smaps_path(pid: int, proc_root: str = "/proc") -> str:
    return os.path.join(proc_root, str(pid), "smaps")


def parse_summary(lines: Iterable[str]) -> dict[str, int]:
    """Aggregate smaps records into a single summary.

    Mapping headers start a new block, ``Name: N kB`` lines are summed
    across blocks, page-size fields keep the last value seen. Lines that
    match neither form (``VmFlags``, truncated records) are ignored.
    """
    summary = {name: 0 for name in SUMMARY_FIELDS}
    for raw in lines:
        line = raw.rstrip("\n")
        if _HEADER_RE.match(line):
            continue
        match = _FIELD_RE.match(line)
        if match is None:
            continue
        name = match.group("name")
        value = int(match.group("value"))
        if name in SINGLETON_FIELDS:
            summary[name] = value
        else:
            summary[name] = summary.get(name, 0) + value
    return summary


def read_summary(pid: int, proc_root: str = "/proc") -> dict[str, int]:
    path = smaps_path(pid, proc_root)
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except FileNotFoundError as exc:
        raise NotFoundError(pid, f"not found ({exc.strerror}: {path})") from exc
    except OSError as exc:
        raise SummaryReadError(pid, f"cannot read {path} ({exc.strerror})") from exc
    # mapped file names may be arbitrary bytes, the records themselves never hold NUL
    if b"\0" in data:
        raise ParseError(pid, f"cannot parse {path}: not a text record")
    return parse_summary(data.decode("utf-8", errors="surrogateescape").splitlines())
