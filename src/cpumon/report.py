"""Text rendering of one tick.

The column layout matches the classic cpu/cpup tools byte for byte, so these
functions only format values that were already computed.
"""

from dataclasses import dataclass, field

from cpumon.delta import CpuRates, percent
from cpumon.models import ProcessLoad, Variant

PROCESS_HEADER = "  PID  PR  NI S    CPU  CNT COMMAND"
TITLE = "  load ( total   idle  iowait system   user      irq  guest)"
REALTIME_PRIORITY = " rt"


@dataclass(slots=True, frozen=True)
class TickReport:
    """Everything computed for one sampling interval."""

    rates: CpuRates
    core_rates: list[CpuRates] = field(default_factory=list)
    process_count: int = 0
    top: list[ProcessLoad] = field(default_factory=list)


def format_percent(value: float) -> str:
    return f"{value:5.1f}%"


def format_priority(priority: int) -> str:
    """Three-character priority; real-time priorities don't fit and show as ``rt``."""
    if priority > 999 or priority < -99:
        return REALTIME_PRIORITY
    return f"{priority:3d}"


def format_title(cpu_count: int) -> str:
    """Column header for the per-core report."""
    title = TITLE
    if cpu_count > 1:
        title += "".join(f"  cpu{i}" for i in range(cpu_count))
    return title


def format_summary(rates: CpuRates, core_rates: list[CpuRates] | None = None) -> str:
    """Aggregate usage line, followed by per-core usage when given."""
    line = (
        f"{format_percent(rates.usage)} "
        f"(T:{rates.total:4d} I:{rates.idle:4d} IO:{rates.iowait:4d} "
        f"S:{rates.system:4d} U:{rates.user:4d} IRQ:{rates.irq:4d} G:{rates.guest:4d})"
    )
    if core_rates:
        line += "".join(format_percent(core.usage) for core in core_rates)
    return line


def format_process_row(entry: ProcessLoad, total: int) -> str:
    proc = entry.record
    return (
        f"{proc.pid:5d} {format_priority(proc.priority)} {proc.nice:3d} {proc.state} "
        f"{format_percent(percent(entry.load, total))} {entry.load:4d} {proc.name}"
    )


def format_processes(top: list[ProcessLoad], process_count: int, total: int) -> list[str]:
    """Process table lines, ending with a blank separator line.

    Args:
        top: Ranked processes to show.
        process_count: Processes seen in the newer snapshot.
        total: Aggregate tick total of the interval (non-zero).
    """
    lines = [f"{process_count} processes", PROCESS_HEADER]
    lines.extend(format_process_row(entry, total) for entry in top)
    lines.append("")
    return lines


def render(report: TickReport, variant: Variant = Variant.PROCESSES) -> str:
    """Render one tick as newline-terminated text."""
    core_rates = report.core_rates if variant.wants_cores else None
    lines = [format_summary(report.rates, core_rates)]
    if variant.wants_processes:
        lines.extend(format_processes(report.top, report.process_count, report.rates.total))
    return "\n".join(lines) + "\n"
