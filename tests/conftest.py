from __future__ import annotations

from pathlib import Path

import pytest

SMAPS_BLOCK = """\
{start:08x}-{end:08x} r-xp 00000000 fd:00 11143998     /usr/bin/{name}
Size:                {size} kB
KernelPageSize:        4 kB
MMUPageSize:           4 kB
Rss:                 {rss} kB
Pss:                 {pss} kB
Shared_Clean:        {shared} kB
Shared_Dirty:          0 kB
Private_Clean:         0 kB
Private_Dirty:       {private} kB
Referenced:          {rss} kB
Anonymous:             0 kB
Swap:                  0 kB
Locked:                0 kB
VmFlags: rd ex mr mw me dw
"""


def smaps_text(*rss_values: int, name: str = "app") -> str:
    blocks = []
    for idx, rss in enumerate(rss_values):
        blocks.append(
            SMAPS_BLOCK.format(
                start=0x400000 + idx * 0x1000,
                end=0x401000 + idx * 0x1000,
                name=name,
                size=rss * 2,
                rss=rss,
                pss=rss // 2,
                shared=rss - rss // 4,
                private=rss // 4,
            )
        )
    return "".join(blocks)


class FakeProc:
    def __init__(self, root: Path) -> None:
        self.root = root
        (root / "self").mkdir()
        (root / "meminfo").write_text("MemTotal: 1 kB\n")

    def add(self, pid: int, *rss_values: int, cmdline: bytes | None = None) -> Path:
        pid_dir = self.root / str(pid)
        pid_dir.mkdir(exist_ok=True)
        (pid_dir / "smaps").write_text(smaps_text(*rss_values))
        if cmdline is None:
            cmdline = f"/usr/bin/proc{pid}\0--flag\0".encode()
        (pid_dir / "cmdline").write_bytes(cmdline)
        return pid_dir

    def remove(self, pid: int) -> None:
        pid_dir = self.root / str(pid)
        for child in pid_dir.iterdir():
            child.unlink()
        pid_dir.rmdir()


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    root = tmp_path / "proc"
    root.mkdir()
    return FakeProc(root)


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
