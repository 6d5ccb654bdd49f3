"""Memory for running the CPU."""

import logging
import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Self

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

logger = logging.getLogger(__name__)

class Memory(ABC):
    """Abstract interface for computer memory."""

    @abstractmethod
    def __len__(self) -> int:
        """Return the number of bytes in the memory object."""

    @abstractmethod
    def read(self, address: int) -> int:
        """Return the byte at the given memory location.

        Args:
            address: Memory location to read byte from.

        Returns:
            value: Value of byte read from memory.

        Raises:
            IndexError: If address is outside of memory.

        """

    @abstractmethod
    def write(self, address: int, value: int) -> None:
        """Write a value to a memory location.

        Args:
            address: Memory location to write the byte to.
            value: Value of the byte. Anything above the eight least significant bits is discarded by a bit mask.

        Raises:
            IndexError: If address is outside of memory.

        """


class MemoryBlock(Memory):
    """Simple block of contiguous memory of configurable size."""

    def __init__(self, size: int = 65536) -> None:
        """Initialize empty memory of given size.

        Args:
            size: Number of bytes in the memory.

        """
        super().__init__()
        self.mem = bytearray(size)

    def _check_address_bounds(self, address: int) -> None:
        """Check if memory address is within the bound of this memory."""
        if not (0 <= address < len(self.mem)):
            msg = f"Address {address:04x} out of memory range."
            raise IndexError(msg)

    @override
    def __len__(self) -> int:
        return len(self.mem)

    @override
    def read(self, address: int) -> int:
        self._check_address_bounds(address)
        return self.mem[address]

    @override
    def write(self, address: int, value: int) -> None:
        self._check_address_bounds(address)
        self.mem[address] = value & 0xff

    def write_bytes(self, start_address: int, sequence: bytes) -> None:
        """Write a sequence of bytes to a memory region.

        Args:
            start_address: First memory address to be overwritten by `sequence`.
            sequence: Sequence of bytes to write to memory region.

        Raises:
            IndexError: If sequence at specified location exceeds the bounds of the memory.

        """
        self._check_address_bounds(start_address)
        if sequence:
            self._check_address_bounds(start_address + len(sequence) - 1)
        self.mem[start_address:start_address + len(sequence)] = sequence

    def write_bytes_hex(self, start_address: int, sequence: str) -> None:
        """Write a string of hexadecimal digits to a memory region, e.g. `"a9 42 02"`.

        Raises:
            IndexError: If sequence at specified location exceeds the bounds of the memory.
            ValueError: If `sequence` is not valid hexadecimal.

        """
        self.write_bytes(start_address, bytes.fromhex(sequence))


class ReadOnlyMemory(Memory):
    """Block of memory initialized from an image that ignores writes."""

    def __init__(self, data: bytes, size: int | None = None) -> None:
        """Initialize ROM from `data`, padded with zeros to `size` bytes.

        Raises:
            ValueError: If `data` does not fit into `size` bytes.

        """
        super().__init__()
        if size is None:
            size = len(data)
        if len(data) > size:
            msg = f"Image of {len(data)} bytes does not fit into {size} bytes of ROM."
            raise ValueError(msg)
        self.mem = bytes(data) + bytes(size - len(data))

    @override
    def __len__(self) -> int:
        return len(self.mem)

    @override
    def read(self, address: int) -> int:
        if not (0 <= address < len(self.mem)):
            msg = f"Address {address:04x} out of memory range."
            raise IndexError(msg)
        return self.mem[address]

    @override
    def write(self, address: int, value: int) -> None:
        logger.debug(f"Ignored write of 0x{value & 0xff:02x} to read-only offset 0x{address:04x}.")


class MMIORegister(Memory):
    """A single byte of Memory-Mapped Input/Output backed by callbacks.

    A register without a read callback reads as 0, one without a write callback drops writes.
    """

    def __init__(
        self,
        read_callback: Callable[[], int] | None = None,
        write_callback: Callable[[int], None] | None = None,
    ) -> None:
        """Initialize register with callbacks for reads and writes."""
        super().__init__()
        self.read_callback = read_callback
        self.write_callback = write_callback

    @override
    def __len__(self) -> int:
        return 1

    @override
    def read(self, address: int) -> int:
        if self.read_callback is None:
            return 0
        return self.read_callback() & 0xff

    @override
    def write(self, address: int, value: int) -> None:
        if self.write_callback is not None:
            self.write_callback(value & 0xff)


@dataclass
class MemoryMapRegion:
    """One memory region entry in a `MemoryMap`."""

    start: int
    """First address in the memory map that falls into this region."""

    end: int
    """Last address in the memory map that falls into this region."""

    memory: Memory
    """Reference to the `Memory` object backing this region."""

    def __contains__(self, address: int) -> bool:
        """Check if the region contains a given address."""
        return self.start <= address <= self.end


class MemoryMap(Memory):
    """Memory map of multiple components.

    Regions may overlap, an address belongs to the region that was added first.
    """

    def __init__(self) -> None:  # noqa: D107
        super().__init__()
        self.regions: list[MemoryMapRegion] = []

    def add_block(self, start: int, block: Memory, end: int | None = None) -> Self:
        """Add a memory block to the map at a given start address.

        If `start` is 0x0100, the the first byte within the block can be found at address 0x0100 within the memory map.

        Args:
            start: First address of the region.
            block: Memory backing the region.
            end: Last address of the region, inclusive. Defaults to the last byte of `block`.

        Raises:
            ValueError: If `end` lies before `start` or the region is larger than `block`.

        Returns:
            self: Self reference for fluent interface.

        """
        if end is None:
            end = start + len(block) - 1
        if end < start:
            msg = f"Region end 0x{end:04x} lies before its start 0x{start:04x}."
            raise ValueError(msg)
        if end - start + 1 > len(block):
            msg = f"Region 0x{start:04x}-0x{end:04x} is larger than its block of {len(block)} bytes."
            raise ValueError(msg)
        self.regions.append(MemoryMapRegion(start, end, block))
        return self

    def get_containing_region(self, address: int) -> MemoryMapRegion | None:
        """Return the first region containing `address` or None."""
        return next((r for r in self.regions if address in r), None)

    @override
    def __len__(self) -> int:
        return max((r.end + 1 for r in self.regions), default=0)

    @override
    def read(self, address: int) -> int:
        region = self.get_containing_region(address)
        if region is None:
            logger.debug(f"Tried to read address 0x{address:04x} that is not part of memory map.")
            return 0
        return region.memory.read(address - region.start)

    @override
    def write(self, address: int, value: int) -> None:
        region = self.get_containing_region(address)
        if region is None:
            logger.debug(f"Tried to write to address 0x{address:04x} that is not part of memory map.")
            return
        region.memory.write(address - region.start, value)
