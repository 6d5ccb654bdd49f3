"""Unit tests of the CPU and the memory locations they share."""

from mos6502.cpu import CPU6502
from mos6502.memory import MemoryBlock

PROGRAM_START: int = 0x0200
ZERO_PAGE_LOCATION: int = 0x20
INDEX: int = 0x05
ABSOLUTE_LOCATION: int = 0x0301  # lower byte + index must be less than 255
PAGE_CROSS_INDEX: int = 0xff
ZERO_PAGE_POINTER_LOCATION: int = 0x08
INDIRECT_DATA_LOCATION: int = 0x0310
TEST_VALUE: int = 0xc5


def load_program(cpu: CPU6502, program: str, start: int = PROGRAM_START) -> None:
    """Write hexadecimal machine code to `start` and point the program counter at it."""
    assert isinstance(cpu.memory, MemoryBlock)
    cpu.memory.write_bytes_hex(start, program)
    cpu.set_program_counter(start)


def flag(cpu: CPU6502, flag_index: int) -> int:
    """Return a status flag as 0 or 1."""
    return (cpu.status >> flag_index) & 1
