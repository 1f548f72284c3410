"""Counter differences and the rates derived from them."""

import struct
from dataclasses import dataclass

from cpumon.models import COUNTER_FIELDS, CounterBlock


def diff(older: CounterBlock, newer: CounterBlock) -> CounterBlock:
    """Subtract two samples field by field.

    A field that went backwards (counter reset) reads as 0 for this interval.
    """
    return CounterBlock(
        *(max(getattr(newer, name) - getattr(older, name), 0) for name in COUNTER_FIELDS)
    )


def total(block: CounterBlock) -> int:
    return sum(block.values())


def load(block: CounterBlock) -> int:
    """Busy ticks: everything except idle and iowait."""
    return (
        block.user
        + block.nice
        + block.system
        + block.irq
        + block.softirq
        + block.steal
        + block.guest
        + block.guest_nice
    )


def idle(block: CounterBlock) -> int:
    return block.idle + block.iowait


def iowait(block: CounterBlock) -> int:
    return block.iowait


def system(block: CounterBlock) -> int:
    return block.system


def user(block: CounterBlock) -> int:
    return block.user + block.nice


def irq(block: CounterBlock) -> int:
    return block.irq + block.softirq


def guest(block: CounterBlock) -> int:
    return block.guest + block.guest_nice


def _single(value: float) -> float:
    """Round to the nearest IEEE single-precision value."""
    return struct.unpack("f", struct.pack("f", value))[0]


def percent(part: int, whole: int) -> float:
    """``part / whole * 100`` rounded as single-precision floats at every step.

    The classic cpu tools compute in C ``float``; doing the same keeps the
    one-decimal output identical (23/80 prints 28.8, not 28.7).
    """
    return _single(_single(_single(part) / _single(whole)) * 100)


def usage_percent(block: CounterBlock) -> float:
    """Busy share of the interval in percent; 0.0 for an empty interval."""
    return percent(load(block), total(block) or 1)


@dataclass(slots=True, frozen=True)
class CpuRates:
    """Displayed categories for one diff block.

    ``total`` is never 0 so it can be used directly as a denominator.
    """

    total: int
    load: int
    idle: int
    iowait: int
    system: int
    user: int
    irq: int
    guest: int
    usage: float

    @classmethod
    def from_diff(cls, block: CounterBlock) -> "CpuRates":
        return cls(
            total=total(block) or 1,
            load=load(block),
            idle=idle(block),
            iowait=iowait(block),
            system=system(block),
            user=user(block),
            irq=irq(block),
            guest=guest(block),
            usage=usage_percent(block),
        )

    @classmethod
    def between(cls, older: CounterBlock, newer: CounterBlock) -> "CpuRates":
        return cls.from_diff(diff(older, newer))
