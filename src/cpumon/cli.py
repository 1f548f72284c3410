"""Console entry points.

None of the commands take arguments: each samples every 5 seconds until it is
killed, and exits with status 1 as soon as the counters cannot be read.
"""

import sys

import structlog

from cpumon import logging as cpumon_logging
from cpumon.models import Variant
from cpumon.monitor import run
from cpumon.source import ReadError

log = structlog.get_logger()

EXIT_READ_FAILURE = 1
EXIT_INTERRUPTED = 130


def run_variant(variant: Variant) -> int:
    """Run one report variant on stdout and return the process exit status."""
    cpumon_logging.configure()
    try:
        run(variant, sys.stdout)
    except ReadError as e:
        log.error("read_failed", variant=variant.value, error=str(e))
        return EXIT_READ_FAILURE
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    return 0


def main() -> None:
    """Aggregate and per-core usage plus the busiest processes."""
    sys.exit(run_variant(Variant.PROCESSES))


def main_cores() -> None:
    """Aggregate and per-core usage under a column title."""
    sys.exit(run_variant(Variant.CORES))


def main_summary() -> None:
    """Aggregate usage only."""
    sys.exit(run_variant(Variant.SUMMARY))


if __name__ == "__main__":
    main()
