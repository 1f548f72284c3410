"""Shared test fixtures for cpumon."""

from pathlib import Path

import pytest

from cpumon.config import Settings
from cpumon.models import ProcessLoad, ProcessRecord


class FakeProc:
    """A writable stand-in for /proc with a stat file and pid directories."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def set_stat(self, aggregate: str, cores: list[str] | None = None) -> None:
        """Write /proc/stat from counter strings like ``"100 0 50 800"``."""
        lines = [f"cpu  {aggregate}"]
        for i, counters in enumerate(cores or []):
            lines.append(f"cpu{i} {counters}")
        lines.append("intr 12345 0 0")
        lines.append("ctxt 67890")
        (self.root / "stat").write_text("\n".join(lines) + "\n")

    def add_process(
        self,
        pid: int,
        name: str = "proc",
        state: str = "S",
        utime: int = 0,
        stime: int = 0,
        cutime: int = 0,
        cstime: int = 0,
        priority: int = 20,
        nice: int = 0,
    ) -> None:
        (self.root / str(pid)).mkdir(exist_ok=True)
        (self.root / str(pid) / "stat").write_text(
            make_pid_stat_line(pid, name, state, utime, stime, cutime, cstime, priority, nice)
        )

    def remove_process(self, pid: int) -> None:
        (self.root / str(pid) / "stat").unlink()
        (self.root / str(pid)).rmdir()


def make_pid_stat_line(
    pid: int,
    name: str = "proc",
    state: str = "S",
    utime: int = 0,
    stime: int = 0,
    cutime: int = 0,
    cstime: int = 0,
    priority: int = 20,
    nice: int = 0,
) -> str:
    """Build a /proc/<pid>/stat line with the kernel's field layout."""
    # ppid pgrp session tty_nr tpgid flags minflt cminflt majflt cmajflt
    skipped = "1 1 1 0 -1 4194560 120 0 3 0"
    tail = "1 0 12345 10000000 200 18446744073709551615"
    return (
        f"{pid} ({name}) {state} {skipped} "
        f"{utime} {stime} {cutime} {cstime} {priority} {nice} {tail}\n"
    )


def make_record(
    pid: int,
    utime: int = 0,
    stime: int = 0,
    name: str = "proc",
    state: str = "S",
    priority: int = 20,
    nice: int = 0,
) -> ProcessRecord:
    """Create a ProcessRecord for testing."""
    return ProcessRecord(
        pid=pid,
        name=name,
        state=state,
        utime=utime,
        stime=stime,
        cutime=0,
        cstime=0,
        priority=priority,
        nice=nice,
    )


def make_load(pid: int, load: int, **kwargs) -> ProcessLoad:
    return ProcessLoad(record=make_record(pid, **kwargs), load=load)


@pytest.fixture
def fake_proc(tmp_path: Path) -> FakeProc:
    """An empty fake proc tree."""
    return FakeProc(tmp_path / "proc")


@pytest.fixture
def settings(fake_proc: FakeProc) -> Settings:
    """Settings pointing at the fake proc tree with no sampling delay."""
    return Settings(interval=0.0, proc_root=fake_proc.root)
