"""Sampling loop: enumerate, collect, rank, render, persist, pace."""
from __future__ import annotations

import logging
import sys
import time
from datetime import datetime
from typing import Callable, TextIO

import psutil

from .config import MonitorConfig
from .metrics.smaps import SummaryError, read_summary
from .procfs import list_pids, read_cmdline, sanitize_cmdline
from .report import SEPARATOR, render_round
from .tracker import ProcessSample, TopNTracker
from .writer import snapshot_path, write_snapshot

logger = logging.getLogger(__name__)


def collect_sample(pid: int, proc_root: str, clock: Callable[[], float] = time.time) -> ProcessSample | None:
    try:
        summary = read_summary(pid, proc_root)
    except SummaryError as exc:
        logger.debug("skip %s", exc)
        return None
    try:
        raw = read_cmdline(pid, proc_root)
    except OSError as exc:
        logger.debug("skip pid %d: cmdline unreadable (%s)", pid, exc.strerror)
        return None
    rss = summary.get("Rss", 0)
    if not rss:
        return None
    return ProcessSample(
        pid=pid,
        resident_size=rss,
        command_line=sanitize_cmdline(raw),
        sampled_at=datetime.fromtimestamp(clock()),
    )


def collect_round(proc_root: str, clock: Callable[[], float] = time.time) -> list[ProcessSample]:
    samples: list[ProcessSample] = []
    pids = list_pids(proc_root)
    for pid in pids:
        sample = collect_sample(pid, proc_root, clock)
        if sample is not None:
            samples.append(sample)
    logger.debug("round collected %d of %d pids", len(samples), len(pids))
    return samples


class Sampler:
    def __init__(
        self,
        cfg: MonitorConfig,
        stream: TextIO | None = None,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.cfg = cfg
        self.tracker = TopNTracker(cfg.max_lines)
        self._stream = stream
        self._clock = clock
        self._sleep = sleep
        self._process = psutil.Process()
        self.rounds = 0
        self.started_at = datetime.fromtimestamp(clock())

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def run_round(self) -> list[str]:
        round_start = self._clock()
        started_at = datetime.fromtimestamp(round_start)

        samples = collect_round(self.cfg.proc_root, self._clock)
        total = self.tracker.observe(samples, started_at)

        lines = render_round(
            self.tracker.ranked(),
            self.tracker.peak,
            self.started_at,
            self.cfg.max_line_length,
            self.cfg.timestamp_format,
        )
        out = self.stream
        out.write(SEPARATOR + "\n")
        for line in lines:
            out.write(line + "\n")
        out.flush()

        if self.cfg.write_prefix:
            path = snapshot_path(self.cfg.write_prefix, self.cfg.write_strftime, started_at)
            write_snapshot(path, lines)
            logger.debug("snapshot written to %s", path)

        self.rounds += 1
        logger.debug(
            "round %d: total=%dkB tracked=%d took=%.3fs self_rss=%dkB",
            self.rounds,
            total,
            len(self.tracker.working_set),
            self._clock() - round_start,
            self._process.memory_info().rss // 1024,
        )
        return lines

    def _expired(self, start: float) -> bool:
        if self.cfg.runtime_minutes < 0:
            return False
        return self._clock() - start > self.cfg.runtime_minutes * 60

    def run(self) -> int:
        start = self._clock()
        self.started_at = datetime.fromtimestamp(start)
        # the first round always runs; later rounds check the window before starting
        while True:
            round_start = self._clock()
            self.run_round()
            remaining = self.cfg.refresh_seconds - (self._clock() - round_start)
            if remaining > 0:
                self._sleep(remaining)
            if self._expired(start):
                break
        return self.rounds
