"""Fixtures for testing."""

import pytest

from mos6502.cpu import CPU6502
from mos6502.memory import MemoryBlock


@pytest.fixture
def memory() -> MemoryBlock:
    """Return 64K of RAM initialized to zero, so the CPU resets to $0000."""
    return MemoryBlock(0x10000)


@pytest.fixture
def cpu(memory: MemoryBlock) -> CPU6502:
    """Return a CPU with 64K of RAM initialized to zero."""
    return CPU6502(memory)
