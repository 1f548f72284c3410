"""Sampling engine for cpumon."""

import threading
import time
from collections.abc import Callable
from queue import Queue
from typing import TextIO

import structlog

from cpumon.config import DEFAULT_SETTINGS, Settings
from cpumon.delta import CpuRates
from cpumon.models import Snapshot, Variant
from cpumon.ranking import top_n
from cpumon.reconcile import reconcile
from cpumon.report import TickReport, format_title, render
from cpumon.source import ReadError, online_cpu_count, read_aggregate, read_processes

log = structlog.get_logger()


class Sampler:
    """
    Double-buffered sampler.

    Holds exactly two snapshots: ``older`` and ``newer``. Each call to
    sample() refills ``newer``, diffs it against ``older`` and swaps the two
    slots, so the snapshot just taken becomes the baseline for the next tick.
    """

    def __init__(
        self,
        settings: Settings = DEFAULT_SETTINGS,
        variant: Variant = Variant.PROCESSES,
        cpu_count: int | None = None,
    ) -> None:
        """
        Initialize the Sampler.

        Args:
            settings: Paths and display settings.
            variant: Which report the samples feed; decides what gets read.
            cpu_count: Logical CPU count. Defaults to the online count at startup.
        """
        self._settings = settings
        self._variant = variant
        self._cpu_count = cpu_count if cpu_count is not None else online_cpu_count()
        self.older: Snapshot | None = None
        self.newer: Snapshot | None = None

    @property
    def cpu_count(self) -> int:
        return self._cpu_count

    @property
    def variant(self) -> Variant:
        return self._variant

    @property
    def is_primed(self) -> bool:
        return self.older is not None

    def capture(self) -> Snapshot:
        """Read one snapshot. Raises ReadError on any fatal read failure."""
        cpu_count = self._cpu_count if self._variant.wants_cores else 1
        aggregate, cores = read_aggregate(cpu_count, self._settings.proc_root)
        processes = None
        if self._variant.wants_processes:
            processes = read_processes(self._settings.proc_root, self._settings.name_length)
        return Snapshot(aggregate=aggregate, cores=cores, processes=processes)

    def prime(self) -> None:
        """Take the baseline snapshot."""
        self.older = self.capture()

    def swap(self) -> None:
        self.older, self.newer = self.newer, self.older

    def sample(self) -> TickReport:
        """Take the next snapshot, compute the interval's report and rotate."""
        if self.older is None:
            raise RuntimeError("sample() called before prime()")

        self.newer = self.capture()
        report = self.compute(self.older, self.newer)
        self.swap()
        return report

    def compute(self, older: Snapshot, newer: Snapshot) -> TickReport:
        """Build the report for the interval between two snapshots."""
        rates = CpuRates.between(older.aggregate, newer.aggregate)
        core_rates = [CpuRates.between(a, b) for a, b in zip(older.cores, newer.cores)]

        if older.processes is None or newer.processes is None:
            return TickReport(rates=rates, core_rates=core_rates)

        loads = reconcile(older.processes, newer.processes)
        return TickReport(
            rates=rates,
            core_rates=core_rates,
            process_count=len(newer.processes),
            top=top_n(loads, self._settings.display_count),
        )


def run(
    variant: Variant,
    out: TextIO,
    settings: Settings = DEFAULT_SETTINGS,
    sleep: Callable[[float], None] = time.sleep,
    max_ticks: int | None = None,
    cpu_count: int | None = None,
) -> None:
    """
    Sample and print forever (or for ``max_ticks`` ticks).

    A ReadError is not retried: it propagates and ends the run.
    """
    sampler = Sampler(settings, variant, cpu_count)
    if variant is Variant.CORES:
        out.write(format_title(sampler.cpu_count) + "\n")
        out.flush()

    sampler.prime()
    log.debug("sampler_primed", variant=variant.value, cpu_count=sampler.cpu_count)

    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        sleep(settings.interval)
        report = sampler.sample()
        out.write(render(report, variant))
        out.flush()
        ticks += 1


class SystemMonitor:
    """
    Background sampler for the live view.

    Runs in a separate daemon thread and pushes a TickReport to a thread-safe
    Queue every interval. Any error stops the thread; the error is kept on
    ``failure`` for the consumer to report.
    """

    def __init__(
        self,
        update_queue: Queue[TickReport],
        poll_rate: float = DEFAULT_SETTINGS.interval,
        settings: Settings = DEFAULT_SETTINGS,
        cpu_count: int | None = None,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            update_queue: Thread-safe queue to push reports to.
            poll_rate: Seconds between samples.
            settings: Paths and display settings.
            cpu_count: Logical CPU count. Defaults to the online count.
        """
        self._queue = update_queue
        self._poll_rate = max(0.1, poll_rate)
        self._sampler = Sampler(settings, Variant.PROCESSES, cpu_count)
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self.failure: Exception | None = None

    @property
    def poll_rate(self) -> float:
        return self._poll_rate

    @property
    def cpu_count(self) -> int:
        return self._sampler.cpu_count

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the monitoring thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._poll_loop,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Stop the monitoring thread.

        Args:
            timeout: How long to wait for thread to stop (seconds).
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _poll_loop(self) -> None:
        """Main polling loop running in the background thread."""
        try:
            if not self._sampler.is_primed:
                self._sampler.prime()
            # Wait for poll_rate seconds or until stop is requested
            while not self._stop_event.wait(timeout=self._poll_rate):
                self._queue.put(self._sampler.sample())
        except ReadError as e:
            self.failure = e
            log.error("monitor_stopped", error=str(e))
        except Exception as e:
            self.failure = e
            log.exception("monitor_crashed")
