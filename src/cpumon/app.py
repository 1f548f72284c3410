"""cpumon - Textual live view."""

import sys
from queue import Empty, Queue

from rich.text import Text
from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal
from textual.widgets import DataTable, Footer, Static

from cpumon import logging as cpumon_logging
from cpumon.config import DEFAULT_SETTINGS, Settings
from cpumon.delta import percent
from cpumon.models import ProcessLoad
from cpumon.monitor import SystemMonitor
from cpumon.report import TickReport, format_percent, format_priority, format_summary


def usage_bar(usage: float, width: int = 20) -> str:
    """Render a usage percentage as a markup bar of ``width`` cells."""
    filled = min(int(usage * width / 100), width)
    return "[green]█[/green]" * filled + "[dim]░[/dim]" * (width - filled)


class HeaderStats(Static):
    """Header widget showing aggregate and per-core usage."""

    DEFAULT_CSS = """
    HeaderStats {
        height: auto;
        min-height: 3;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize HeaderStats."""
        super().__init__(*args, **kwargs)
        self._report: TickReport | None = None

    def compose(self) -> ComposeResult:
        """Compose the header stats layout."""
        yield Horizontal(
            Static(self._get_summary(), id="summary-info"),
            Static(self._get_cores(), id="cores-info"),
        )

    def update_stats(self, report: TickReport) -> None:
        """Update the statistics from a tick report."""
        self._report = report
        self.query_one("#summary-info", Static).update(self._get_summary())
        self.query_one("#cores-info", Static).update(self._get_cores())

    def _get_summary(self) -> str:
        if self._report is None:
            return "Sampling..."
        return format_summary(self._report.rates)

    def _get_cores(self) -> str:
        if self._report is None or not self._report.core_rates:
            return ""
        lines = []
        for i, core in enumerate(self._report.core_rates):
            lines.append(f"CPU{i:<2} \\[{usage_bar(core.usage)}] {core.usage:5.1f}%")
        return "\n".join(lines)


class ProcessTable(Container):
    """Container for the ranked process table."""

    DEFAULT_CSS = """
    ProcessTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    COLUMNS = (
        ("PID", "pid", 7),
        ("PR", "priority", 4),
        ("NI", "nice", 4),
        ("S", "state", 3),
        ("CPU", "cpu", 8),
        ("CNT", "count", 6),
    )

    def compose(self) -> ComposeResult:
        """Compose the process table."""
        yield DataTable(id="process-table")

    def on_mount(self) -> None:
        """Initialize the data table when mounted."""
        table = self.query_one("#process-table", DataTable)
        table.cursor_type = "row"
        for label, key, width in self.COLUMNS:
            table.add_column(label, key=key, width=width)
        table.add_column("COMMAND", key="command")

    def update_processes(self, top: list[ProcessLoad], total: int) -> None:
        """Replace the rows with the latest ranking, busiest first."""
        table = self.query_one("#process-table", DataTable)
        table.clear()
        for entry in top:
            proc = entry.record
            table.add_row(
                str(proc.pid),
                format_priority(proc.priority).strip(),
                str(proc.nice),
                proc.state,
                format_percent(percent(entry.load, total)),
                str(entry.load),
                # Process names are user-chosen; never parse them as markup
                Text(proc.name),
                key=str(proc.pid),
            )


class CpumonApp(App):
    """Live view of CPU usage and the busiest processes."""

    TITLE = "cpumon"
    SUB_TITLE = "CPU usage monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #header-stats {
        dock: top;
        height: auto;
    }

    Horizontal {
        height: auto;
    }

    #summary-info {
        width: 1fr;
        padding-right: 2;
    }

    #cores-info {
        width: 1fr;
        padding-left: 2;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        settings: Settings = DEFAULT_SETTINGS,
        poll_rate: float | None = None,
        cpu_count: int | None = None,
    ) -> None:
        """Initialize the CpumonApp."""
        super().__init__()
        self._update_queue: Queue[TickReport] = Queue()
        self._monitor = SystemMonitor(
            self._update_queue,
            poll_rate=settings.interval if poll_rate is None else poll_rate,
            settings=settings,
            cpu_count=cpu_count,
        )

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield HeaderStats(id="header-stats")
        yield ProcessTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the system monitor when the app is mounted."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Show the most recent report, or exit if sampling failed."""
        if self._monitor.failure is not None:
            self._monitor.stop()
            self.exit(return_code=1, message=f"cpumon: {self._monitor.failure}")
            return

        report = None
        while True:
            try:
                report = self._update_queue.get_nowait()
            except Empty:
                break

        if report is not None:
            self._update_ui(report)

    def _update_ui(self, report: TickReport) -> None:
        self.query_one("#header-stats", HeaderStats).update_stats(report)
        self.sub_title = f"{report.process_count} processes"
        self.query_one(ProcessTable).update_processes(report.top, report.rates.total)

    def action_quit(self) -> None:
        """Handle quit action with graceful cleanup."""
        self._monitor.stop()
        self.exit()


def main() -> None:
    """Entry point for the live view."""
    cpumon_logging.configure()
    app = CpumonApp()
    app.run()
    sys.exit(app.return_code or 0)


if __name__ == "__main__":
    main()
