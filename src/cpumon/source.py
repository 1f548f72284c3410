"""Counter readers for /proc/stat and /proc/<pid>/stat."""

import os
from pathlib import Path

import psutil
import structlog

from cpumon.models import COUNTER_FIELDS, MIN_COUNTER_FIELDS, CounterBlock, ProcessRecord

log = structlog.get_logger()

DEFAULT_PROC_ROOT = Path("/proc")

# Field layout of /proc/<pid>/stat after the closing parenthesis of the name.
# Offsets are relative to the state field; see proc(5).
PID_STAT_STATE = 0
PID_STAT_SKIPPED = (
    "ppid",
    "pgrp",
    "session",
    "tty_nr",
    "tpgid",
    "flags",
    "minflt",
    "cminflt",
    "majflt",
    "cmajflt",
)
PID_STAT_FIELDS = {
    "utime": 1 + len(PID_STAT_SKIPPED),
    "stime": 2 + len(PID_STAT_SKIPPED),
    "cutime": 3 + len(PID_STAT_SKIPPED),
    "cstime": 4 + len(PID_STAT_SKIPPED),
    "priority": 5 + len(PID_STAT_SKIPPED),
    "nice": 6 + len(PID_STAT_SKIPPED),
}
# state + the six numeric fields above
PID_STAT_REQUIRED = 1 + len(PID_STAT_FIELDS)


class ReadError(Exception):
    """The counter source could not be read; the current run cannot continue."""


def online_cpu_count() -> int:
    """Number of logical CPUs, as fixed at startup."""
    return psutil.cpu_count(logical=True) or 1


def _leading_ints(tokens: list[str], limit: int) -> list[int]:
    """Parse tokens as unsigned integers until the first one that is not."""
    values: list[int] = []
    for token in tokens[:limit]:
        if not token.isdigit():
            break
        values.append(int(token))
    return values


def parse_counter_line(line: str, label: str | None = None) -> CounterBlock:
    """Parse one ``cpu`` or ``cpuN`` line of /proc/stat.

    Args:
        line: The raw line.
        label: Expected first token. ``None`` accepts any ``cpuN`` label.

    Raises:
        ReadError: Wrong label, or fewer than four numeric counters.
    """
    tokens = line.split()
    if not tokens:
        raise ReadError("empty cpu line")

    name = tokens[0]
    if label is not None:
        if name != label:
            raise ReadError(f"expected {label!r} line, got {name!r}")
    elif not (name.startswith("cpu") and name[3:].isdigit()):
        raise ReadError(f"expected per-cpu line, got {name!r}")

    values = _leading_ints(tokens[1:], len(COUNTER_FIELDS))
    if len(values) < MIN_COUNTER_FIELDS:
        raise ReadError(f"{name}: only {len(values)} counters, need {MIN_COUNTER_FIELDS}")
    return CounterBlock.from_values(values)


def read_aggregate(
    cpu_count: int,
    proc_root: Path = DEFAULT_PROC_ROOT,
) -> tuple[CounterBlock, list[CounterBlock]]:
    """Read the system-wide counters and, for multi-CPU hosts, each core's.

    Returns:
        ``(aggregate, cores)``; ``cores`` is empty when ``cpu_count <= 1``.

    Raises:
        ReadError: The file is missing, unreadable, truncated or malformed.
    """
    path = proc_root / "stat"
    try:
        with path.open("r", encoding="ascii", errors="replace") as f:
            aggregate = parse_counter_line(_next_line(f, path), label="cpu")
            cores = []
            if cpu_count > 1:
                for _ in range(cpu_count):
                    cores.append(parse_counter_line(_next_line(f, path)))
    except OSError as e:
        log.error("stat_read_failed", path=str(path), error=str(e))
        raise ReadError(f"{path}: {e}") from e
    except ReadError as e:
        log.error("stat_read_failed", path=str(path), error=str(e))
        raise

    return aggregate, cores


def _next_line(f, path: Path) -> str:
    line = f.readline()
    if not line:
        raise ReadError(f"{path}: unexpected end of file")
    return line


def parse_pid_stat(pid: int, line: str, name_length: int = 15) -> ProcessRecord | None:
    """Try to parse one /proc/<pid>/stat line.

    The name is whatever sits between the first ``(`` and the last ``)``, so
    names containing spaces or parentheses survive. The remaining fields are
    positional.

    Returns:
        The record, or ``None`` when the line is malformed.
    """
    start = line.find("(")
    end = line.rfind(")")
    if start < 0 or end <= start:
        return None

    name = line[start + 1 : end][:name_length]
    rest = line[end + 1 :].split()
    if not rest:
        return None

    state = rest[PID_STAT_STATE]
    if len(state) != 1:
        return None

    numbers: dict[str, int] = {}
    for key, offset in PID_STAT_FIELDS.items():
        if offset >= len(rest):
            break
        try:
            numbers[key] = int(rest[offset])
        except ValueError:
            break

    if 1 + len(numbers) != PID_STAT_REQUIRED:
        return None

    return ProcessRecord(pid=pid, name=name, state=state, **numbers)


def read_pid_stat(pid: int, proc_root: Path = DEFAULT_PROC_ROOT, name_length: int = 15) -> ProcessRecord | None:
    """Read and parse one process's accounting line; ``None`` if it is gone or malformed."""
    path = proc_root / str(pid) / "stat"
    try:
        with path.open("r", encoding="utf-8", errors="replace") as f:
            line = f.readline()
    except OSError as e:
        # Exited between the directory listing and the read
        log.debug("pid_stat_skipped", pid=pid, error=str(e))
        return None

    record = parse_pid_stat(pid, line, name_length)
    if record is None:
        log.debug("pid_stat_malformed", pid=pid)
    return record


def read_processes(proc_root: Path = DEFAULT_PROC_ROOT, name_length: int = 15) -> list[ProcessRecord]:
    """Read every visible process, sorted ascending by pid.

    Raises:
        ReadError: ``proc_root`` itself cannot be listed.
    """
    try:
        entries = os.listdir(proc_root)
    except OSError as e:
        log.error("proc_list_failed", path=str(proc_root), error=str(e))
        raise ReadError(f"{proc_root}: {e}") from e

    records = []
    for entry in entries:
        if not entry.isdigit():
            continue
        record = read_pid_stat(int(entry), proc_root, name_length)
        if record is not None:
            records.append(record)

    records.sort(key=lambda r: r.pid)
    return records
