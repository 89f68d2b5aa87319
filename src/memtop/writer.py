"""All-or-nothing snapshot files."""
from __future__ import annotations

import contextlib
import os
import tempfile
from datetime import datetime
from typing import IO


class SnapshotWriteError(Exception):
    def __init__(self, path: str, exc: OSError) -> None:
        super().__init__(f"cannot write snapshot {path}: {exc.strerror or exc}")
        self.path = path


def snapshot_path(prefix: str, pattern: str | None, moment: datetime) -> str:
    if not pattern:
        return prefix
    return prefix + moment.strftime(pattern)


class AtomicWriter:
    """Write to a temporary sibling and rename it over ``path`` on commit."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._handle: IO[str] | None = None
        self._tmp_path: str | None = None

    def open(self) -> "AtomicWriter":
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, self._tmp_path = tempfile.mkstemp(
                prefix=f".{os.path.basename(self.path)}.", suffix=".tmp", dir=directory
            )
        except OSError as exc:
            raise SnapshotWriteError(self.path, exc) from exc
        self._handle = os.fdopen(fd, "w", encoding="utf-8")
        return self

    def write_line(self, text: str) -> None:
        if self._handle is None:
            raise RuntimeError("writer is not open")
        try:
            self._handle.write(text + "\n")
        except OSError as exc:
            self.abort()
            raise SnapshotWriteError(self.path, exc) from exc

    def commit(self) -> None:
        if self._handle is None or self._tmp_path is None:
            raise RuntimeError("writer is not open")
        handle, tmp_path = self._handle, self._tmp_path
        self._handle = self._tmp_path = None
        try:
            handle.flush()
            os.fsync(handle.fileno())
            handle.close()
            # mkstemp creates 0600, snapshots are meant to be shared
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            # close retries a failed flush
            with contextlib.suppress(OSError):
                handle.close()
            _discard(tmp_path)
            raise SnapshotWriteError(self.path, exc) from exc

    def abort(self) -> None:
        if self._handle is not None:
            with contextlib.suppress(OSError):
                self._handle.close()
        if self._tmp_path is not None:
            _discard(self._tmp_path)
        self._handle = self._tmp_path = None

    def __enter__(self) -> "AtomicWriter":
        if self._handle is None:
            self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is None:
            self.commit()
        else:
            self.abort()


def _discard(path: str) -> None:
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass


def write_snapshot(path: str, lines: list[str]) -> None:
    with AtomicWriter(path) as out:
        for line in lines:
            out.write_line(line)
