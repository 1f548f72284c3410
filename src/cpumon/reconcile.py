"""Matching process records between two snapshots."""

from collections.abc import Sequence

from cpumon.models import ProcessLoad, ProcessRecord


def _is_sorted_unique(table: Sequence[ProcessRecord]) -> bool:
    return all(a.pid < b.pid for a, b in zip(table, table[1:]))


def reconcile(older: Sequence[ProcessRecord], newer: Sequence[ProcessRecord]) -> list[ProcessLoad]:
    """Compute each newer process's CPU ticks since the older snapshot.

    Both tables must be sorted ascending by pid with unique pids. The walk is a
    single merge-join: the cursor into ``older`` only moves forward.

    A pid seen only in ``newer`` is charged its full ``cpu_ticks``. A pid the
    kernel reused between the snapshots is indistinguishable from a surviving
    process; if its ticks went down the load is clamped to 0.
    """
    assert _is_sorted_unique(older), "older process table is not sorted by pid"
    assert _is_sorted_unique(newer), "newer process table is not sorted by pid"

    loads = []
    cursor = 0
    for record in newer:
        while cursor < len(older) and older[cursor].pid < record.pid:
            cursor += 1

        ticks = record.cpu_ticks
        if cursor < len(older) and older[cursor].pid == record.pid:
            ticks = max(ticks - older[cursor].cpu_ticks, 0)
        loads.append(ProcessLoad(record=record, load=ticks))

    return loads
