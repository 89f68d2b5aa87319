"""Process list and command line access."""
from __future__ import annotations

import os

DEFAULT_PROC_ROOT = "/proc"


def list_pids(proc_root: str = DEFAULT_PROC_ROOT) -> list[int]:
    return sorted(int(name) for name in os.listdir(proc_root) if name.isdigit() and name.isascii())


def read_cmdline(pid: int, proc_root: str = DEFAULT_PROC_ROOT) -> bytes:
    with open(os.path.join(proc_root, str(pid), "cmdline"), "rb") as handle:
        return handle.read()


def sanitize_cmdline(raw: bytes) -> str:
    text = raw.decode("utf-8", errors="replace")
    return text.replace("\0", " ").rstrip()
