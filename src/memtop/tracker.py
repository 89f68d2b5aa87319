"""Top-N working set and peak tracking across sampling rounds."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable


@dataclass(frozen=True)
class ProcessSample:
    pid: int
    resident_size: int
    command_line: str
    sampled_at: datetime


@dataclass
class PeakObservation:
    value: int = 0
    recorded_at: datetime | None = None

    def update(self, total: int, at: datetime) -> None:
        if total > self.value:
            self.value = total
            self.recorded_at = at


def _by_size(sample: ProcessSample) -> int:
    return sample.resident_size


class TopNTracker:
    """Bounded pid -> sample mapping plus the largest round total seen.

    Entries are only ever displaced by larger ones, so a process that
    exits while ranked keeps its last sample until something overtakes it.
    """

    def __init__(self, max_lines: int) -> None:
        if max_lines < 1:
            raise ValueError(f"max_lines must be positive, got {max_lines}")
        self._max_lines = max_lines
        self._working: dict[int, ProcessSample] = {}
        self._peak = PeakObservation()

    @property
    def working_set(self) -> dict[int, ProcessSample]:
        return dict(self._working)

    @property
    def peak(self) -> PeakObservation:
        return self._peak

    def ranked(self) -> list[ProcessSample]:
        return sorted(self._working.values(), key=_by_size, reverse=True)

    def merge(self, samples: Iterable[ProcessSample]) -> list[ProcessSample]:
        merged = dict(self._working)
        for sample in samples:
            merged[sample.pid] = sample
        # stable sort keeps equal sizes in insertion order between rounds
        top = sorted(merged.values(), key=_by_size, reverse=True)[: self._max_lines]
        self._working = {sample.pid: sample for sample in top}
        return top

    def observe(self, samples: Iterable[ProcessSample], started_at: datetime) -> int:
        fresh = [sample for sample in samples if sample.resident_size > 0]
        total = sum(sample.resident_size for sample in fresh)
        self._peak.update(total, started_at)
        self.merge(fresh)
        return total
