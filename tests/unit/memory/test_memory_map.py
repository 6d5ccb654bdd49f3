"""Tests for Memory Maps."""

import logging

import pytest

from mos6502.memory import MemoryBlock, MemoryMap, ReadOnlyMemory

TEST_VALUE = 0xfe


def test_assemble_single_addresses():  # noqa: D103
    address_0 = MemoryBlock(1)
    address_1 = MemoryBlock(1)
    memory_map = (
        MemoryMap()
        .add_block(0, address_0)
        .add_block(1, address_1)
    )
    assert len(memory_map) == 2


def test_length_is_one_past_highest_mapped_address():  # noqa: D103
    memory_map = MemoryMap().add_block(0x8000, MemoryBlock(0x100)).add_block(0x0000, MemoryBlock(0x100))
    assert len(memory_map) == 0x8100
    assert len(MemoryMap()) == 0


def test_read():  # noqa: D103
    page_1 = MemoryBlock(0x0100)
    page_1.write(0x00, TEST_VALUE)
    page_1.write(0xff, TEST_VALUE)
    memory = (
        MemoryMap()
        .add_block(0x0100, page_1)
    )
    assert memory.read(0x0100) == TEST_VALUE
    assert memory.read(0x01ff) == TEST_VALUE


def test_write_translates_to_local_address():  # noqa: D103
    page_1 = MemoryBlock(0x0100)
    memory = MemoryMap().add_block(0x0100, page_1)
    memory.write(0x0142, TEST_VALUE)
    assert page_1.read(0x42) == TEST_VALUE


def test_bounds_are_inclusive():  # noqa: D103
    low = MemoryBlock(0x10)
    high = MemoryBlock(0x10)
    memory = MemoryMap().add_block(0x00, low, 0x0f).add_block(0x10, high, 0x1f)
    memory.write(0x0f, 1)
    memory.write(0x10, 2)
    memory.write(0x1f, 3)

    assert low.read(0x0f) == 1
    assert high.read(0x00) == 2
    assert high.read(0x0f) == 3


def test_overlapping_regions_resolve_to_first_match():  # noqa: D103
    first = MemoryBlock(0x10)
    second = MemoryBlock(0x20)
    memory = MemoryMap().add_block(0x00, first).add_block(0x00, second)
    memory.write(0x05, TEST_VALUE)
    memory.write(0x15, TEST_VALUE)

    assert first.read(0x05) == TEST_VALUE
    assert second.read(0x05) == 0
    assert second.read(0x15) == TEST_VALUE
    region = memory.get_containing_region(0x05)
    assert region is not None
    assert region.memory is first


def test_unmapped_access(caplog: pytest.LogCaptureFixture):  # noqa: D103
    rom = ReadOnlyMemory(b"\x01")
    memory = MemoryMap().add_block(0x8000, rom)
    with caplog.at_level(logging.DEBUG, logger="mos6502.memory"):
        assert memory.read(0x1234) == 0
        memory.write(0x1234, TEST_VALUE)

    assert memory.get_containing_region(0x1234) is None
    assert all(record.levelno == logging.DEBUG for record in caplog.records)
    assert "0x1234" in caplog.text


def test_end_before_start_is_rejected():  # noqa: D103
    with pytest.raises(ValueError, match="lies before its start"):
        MemoryMap().add_block(0x10, MemoryBlock(1), end=0x0f)


def test_region_larger_than_block_is_rejected():  # noqa: D103
    with pytest.raises(ValueError, match="larger than its block of 16 bytes"):
        MemoryMap().add_block(0x00, MemoryBlock(0x10), end=0x10)


def test_region_smaller_than_block_is_accepted():  # noqa: D103
    block = MemoryBlock(0x10)
    memory = MemoryMap().add_block(0x00, block, end=0x07)
    memory.write(0x08, TEST_VALUE)

    assert len(memory) == 0x08
    assert block.read(0x08) == 0
