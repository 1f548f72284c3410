"""Data models for cpumon."""

from collections.abc import Sequence
from dataclasses import dataclass, field, fields
from enum import Enum

COUNTER_FIELDS = (
    "user",
    "nice",
    "system",
    "idle",
    "iowait",
    "irq",
    "softirq",
    "steal",
    "guest",
    "guest_nice",
)

# Kernels older than 2.6 only report user, nice, system and idle
MIN_COUNTER_FIELDS = 4


@dataclass(slots=True, frozen=True)
class CounterBlock:
    """Cumulative CPU time counters, in scheduler ticks since boot."""

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0
    guest: int = 0
    guest_nice: int = 0

    @classmethod
    def from_values(cls, values: Sequence[int]) -> "CounterBlock":
        """Build a block from up to ten values, zero-filling the missing tail."""
        if len(values) < MIN_COUNTER_FIELDS:
            raise ValueError(f"need at least {MIN_COUNTER_FIELDS} counters, got {len(values)}")
        return cls(*values[: len(COUNTER_FIELDS)])

    def values(self) -> tuple[int, ...]:
        return tuple(getattr(self, f.name) for f in fields(self))


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """One process as read from its accounting line."""

    pid: int
    name: str
    state: str  # 'R', 'S', 'D', 'Z', etc.
    utime: int
    stime: int
    cutime: int  # Tracked, not part of the load
    cstime: int  # Tracked, not part of the load
    priority: int
    nice: int

    @property
    def cpu_ticks(self) -> int:
        """Own user + kernel ticks."""
        return self.utime + self.stime


@dataclass(slots=True, frozen=True)
class ProcessLoad:
    """A process paired with the ticks it consumed during one interval."""

    record: ProcessRecord
    load: int


@dataclass(slots=True)
class Snapshot:
    """Everything captured at one sampling instant."""

    aggregate: CounterBlock
    cores: list[CounterBlock] = field(default_factory=list)
    processes: list[ProcessRecord] | None = None

    @property
    def cpu_count(self) -> int:
        return len(self.cores) or 1


class Variant(Enum):
    """Which report a run produces."""

    SUMMARY = "summary"  # Aggregate line only
    CORES = "cores"  # Title line, aggregate line and per-core usage
    PROCESSES = "processes"  # Aggregate, per-core usage and the busiest processes

    @property
    def wants_cores(self) -> bool:
        return self is not Variant.SUMMARY

    @property
    def wants_processes(self) -> bool:
        return self is Variant.PROCESSES
