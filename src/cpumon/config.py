"""Runtime settings for cpumon.

The tool takes no flags, file or environment variables; these are the fixed
values every entry point runs with. Tests build their own instances to point
the readers at a fake proc tree.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class Settings:
    """Sampling and display settings."""

    interval: float = 5.0  # Seconds between the two snapshots of a tick
    display_count: int = 10  # Rows in the process table
    proc_root: Path = Path("/proc")
    name_length: int = 15  # Process names longer than this are truncated


DEFAULT_SETTINGS = Settings()
