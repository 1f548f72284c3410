"""Tests for cpumon data models."""

import dataclasses

import pytest

from cpumon.models import CounterBlock, ProcessRecord, Snapshot, Variant


def test_counter_block_defaults_to_zero():
    """Test CounterBlock fields default to 0."""
    assert CounterBlock().values() == (0,) * 10
    assert CounterBlock() == CounterBlock.from_values([0, 0, 0, 0])


def test_counter_block_from_four_values():
    """Test older kernels' four-field lines zero-fill the rest."""
    block = CounterBlock.from_values([100, 0, 50, 800])

    assert block.user == 100
    assert block.system == 50
    assert block.idle == 800
    assert block.iowait == 0
    assert block.guest_nice == 0


def test_counter_block_from_values_ignores_extra():
    """Test values beyond the ten known counters are dropped."""
    block = CounterBlock.from_values(list(range(1, 13)))
    assert block.values() == tuple(range(1, 11))


def test_counter_block_from_too_few_values():
    """Test fewer than four counters are rejected."""
    with pytest.raises(ValueError):
        CounterBlock.from_values([1, 2, 3])


def test_counter_block_is_frozen():
    """Test that CounterBlock is immutable (frozen)."""
    block = CounterBlock(user=1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        block.user = 2


def test_process_record_cpu_ticks_excludes_children():
    """Test cpu_ticks counts own user and kernel time only."""
    record = ProcessRecord(
        pid=42,
        name="worker",
        state="R",
        utime=100,
        stime=50,
        cutime=1000,
        cstime=2000,
        priority=20,
        nice=0,
    )
    assert record.cpu_ticks == 150


def test_process_record_uses_slots():
    """Test that ProcessRecord uses __slots__ for memory efficiency."""
    record = ProcessRecord(
        pid=1,
        name="init",
        state="S",
        utime=0,
        stime=0,
        cutime=0,
        cstime=0,
        priority=20,
        nice=0,
    )
    assert not hasattr(record, "__dict__")


def test_snapshot_cpu_count():
    """Test Snapshot reports one CPU when no per-core blocks were read."""
    assert Snapshot(aggregate=CounterBlock()).cpu_count == 1
    assert Snapshot(aggregate=CounterBlock(), cores=[CounterBlock()] * 4).cpu_count == 4


class TestVariant:
    """Tests for Variant enum."""

    def test_summary_reads_nothing_extra(self):
        assert not Variant.SUMMARY.wants_cores
        assert not Variant.SUMMARY.wants_processes

    def test_cores(self):
        assert Variant.CORES.wants_cores
        assert not Variant.CORES.wants_processes

    def test_processes(self):
        assert Variant.PROCESSES.wants_cores
        assert Variant.PROCESSES.wants_processes
