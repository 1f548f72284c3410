"""Selecting the busiest processes."""

from collections.abc import Iterable

from cpumon.config import DEFAULT_SETTINGS
from cpumon.models import ProcessLoad


def top_n(loads: Iterable[ProcessLoad], n: int = DEFAULT_SETTINGS.display_count) -> list[ProcessLoad]:
    """Return the ``n`` entries with the highest load, busiest first.

    Order among equal loads is not part of the contract.
    """
    if n < 0:
        raise ValueError(f"n must be non-negative, got {n}")
    return sorted(loads, key=lambda entry: entry.load, reverse=True)[:n]
