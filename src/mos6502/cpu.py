"""CPU Logic."""

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from typing import Any, ClassVar, Literal, Protocol, cast, runtime_checkable

from mos6502.memory import Memory
from mos6502.utils import assert_never, bcd_to_dec, dec_to_bcd

logger = logging.getLogger(__name__)

Register = Literal["a", "x", "y", "sp"]


class AddressingMode(enum.Enum):
    """Addressing mode of a 6502 instruction.

    Accumulator forms of the shift and rotate instructions carry no addressing mode (`None`).
    """

    IMMEDIATE = enum.auto()
    ZERO_PAGE = enum.auto()
    ZERO_PAGE_X = enum.auto()
    ZERO_PAGE_Y = enum.auto()
    ABSOLUTE = enum.auto()
    ABSOLUTE_X = enum.auto()
    ABSOLUTE_Y = enum.auto()
    INDIRECT = enum.auto()
    INDIRECT_X = enum.auto()
    INDIRECT_Y = enum.auto()
    RELATIVE = enum.auto()


@dataclass(frozen=True)
class CPUState:
    """Snapshot of the register file."""

    pc: int
    sp: int
    a: int
    x: int
    y: int
    status: int

    def __str__(self) -> str:  # noqa: D105
        return (
            f"PC=${self.pc:04x} SP=${self.sp:02x} A=${self.a:02x} X=${self.x:02x} Y=${self.y:02x} "
            f"NV-BDIZC={self.status:08b}"
        )


class InvalidOpcodeError(Exception):
    """Raised when the CPU fetches a byte that does not encode a documented instruction.

    Attributes:
        opcode: The offending byte.
        address: Location the byte was fetched from.
        state: Register file at the failing dispatch, i.e. with the PC already advanced past the opcode and
            operand bytes.

    """

    def __init__(self, opcode: int, address: int, state: CPUState) -> None:  # noqa: D107
        self.opcode = opcode
        self.address = address
        self.state = state
        super().__init__(f"Invalid opcode 0x{opcode:02x} at ${address:04x}")


@runtime_checkable
class OpcodeFunction(Protocol):
    """A callable with generic arguments that carries an `opcode` attribute."""

    opcodes: list[tuple[int, dict[str, Any]]]
    def __call__(self, *args: Any, **kwargs: Any) -> None:  # noqa: ANN401, D102
        ...


def opcode(opcode: int, **kwargs: Any) -> Callable[..., OpcodeFunction]:  # noqa: ANN401
    """Register a set of arguments to an opcode."""
    def decorator(func: Callable[..., None]) -> OpcodeFunction:
        func = cast("OpcodeFunction", func)
        if not hasattr(func, "opcodes"):
            func.opcodes = []
        if opcode in (op for op, _ in func.opcodes):
            msg = f"Opcode 0x{opcode:02x} has already been registered for this function."
            raise ValueError(msg)
        func.opcodes.append((opcode, kwargs))
        return func
    return decorator


class CPU6502:
    """A behavioral model of the MOS6502.

    Every memory access an instruction performs goes through `memory` and costs one cycle. On top of
    that a taken branch costs one cycle, and indexing that carries out of the low address byte costs one
    more. `tick` reports the sum, which is what a caller paces against.
    """

    STATUS_C = 0
    STATUS_Z = 1
    STATUS_I = 2
    STATUS_D = 3
    STATUS_B = 4
    STATUS_U = 5
    STATUS_V = 6
    STATUS_N = 7

    STACK_ROOT = 0x0100

    NMI_VECTOR = 0xfffa
    RST_VECTOR = 0xfffc
    IRQ_VECTOR = 0xfffe

    # cycles a hardware interrupt spends without touching the bus
    INTERRUPT_INTERNAL_CYCLES: ClassVar[int] = 2

    ONE_BYTE_OPCODES: ClassVar[frozenset[int]] = frozenset({
        0x00,  # BRK
        0x08,  # PHP
        0x0a,  # ASL A
        0x18,  # CLC
        0x28,  # PLP
        0x2a,  # ROL A
        0x38,  # SEC
        0x40,  # RTI
        0x48,  # PHA
        0x4a,  # LSR A
        0x58,  # CLI
        0x60,  # RTS
        0x68,  # PLA
        0x6a,  # ROR A
        0x78,  # SEI
        0x88,  # DEY
        0x8a,  # TXA
        0x98,  # TYA
        0x9a,  # TXS
        0xa8,  # TAY
        0xaa,  # TAX
        0xb8,  # CLV
        0xba,  # TSX
        0xc8,  # INY
        0xca,  # DEX
        0xd8,  # CLD
        0xe8,  # INX
        0xea,  # NOP
        0xf8,  # SED
    })

    def __init__(self, memory: Memory) -> None:
        """Initialize a CPU with memory and reset it."""
        # Registers
        self.a: int = 0
        self.x: int = 0
        self.y: int = 0
        self.pc: int = 0
        self.sp: int = 0
        self.status: int = 0
        self.cycles: int = 0

        self.memory = memory
        self.opcodes = self.build_opcode_table()
        self.reset()

    def build_opcode_table(self) -> dict[int, Callable[..., None]]:
        """Return a map between opcode and method that contains the logic for the instruction."""
        opcode_table: dict[int, Callable[..., None]] = {}
        for attr_name in dir(self):
            attr = getattr(self, attr_name)
            func = getattr(attr, "__func__", attr)

            if not isinstance(func, OpcodeFunction):
                continue

            for opcode, kwargs in func.opcodes:
                if opcode in opcode_table:
                    msg = f"Opcode 0x{opcode:02x} has already been registered."
                    raise ValueError(msg)
                opcode_table[opcode] = partial(attr, **kwargs)

        for opcode in self.ONE_BYTE_OPCODES - opcode_table.keys():
            msg = f"One-byte opcode 0x{opcode:02x} has no registered instruction."
            raise ValueError(msg)

        return opcode_table

    def reset(self) -> None:
        """Clear registers and flags and load the program counter from the reset vector."""
        self.a = 0
        self.x = 0
        self.y = 0
        self.sp = 0
        self.status = 0
        self.pc = self.read_word(self.RST_VECTOR)
        self.cycles = 0

    def get_program_counter(self) -> int:
        """Return the address of the next instruction."""
        return self.pc

    def set_program_counter(self, address: int) -> None:
        """Continue execution at `address`."""
        self.pc = address & 0xffff

    def snapshot(self) -> CPUState:
        """Return a copy of the register file."""
        return CPUState(pc=self.pc, sp=self.sp, a=self.a, x=self.x, y=self.y, status=self.status)

    def tick(self, trace: bool = False) -> int:  # noqa: FBT001, FBT002
        """Execute the next instruction.

        Args:
            trace: Log the opcode and the resulting register file at INFO level.

        Returns:
            cycles: Number of cycles the instruction took.

        Raises:
            InvalidOpcodeError: If the byte at the program counter is not a documented opcode.

        """
        initial_pc = self.pc
        self.cycles = 0

        opcode = self.fetch_byte()
        # the CPU always fetches two bytes, one-byte instructions hand the second one back
        operand = self.fetch_byte()
        one_byte_instruction = opcode in self.ONE_BYTE_OPCODES
        if one_byte_instruction:
            self.pc = (self.pc - 1) & 0xffff

        handler = self.opcodes.get(opcode)
        if handler is None:
            state = self.snapshot()
            logger.error(f"Invalid opcode 0x{opcode:02x} at ${initial_pc:04x}: {state}")
            raise InvalidOpcodeError(opcode, initial_pc, state)

        if one_byte_instruction:
            handler()
        else:
            handler(operand)

        if trace:
            logger.info(
                f"${initial_pc:04x}: opcode=0x{opcode:02x} operand=0x{operand:02x} "
                f"cycles={self.cycles} {self.snapshot()}",
            )
        return self.cycles

    # Bus access

    def read_byte(self, address: int) -> int:
        """Read a byte from memory, charging one cycle."""
        self.cycles += 1
        return self.memory.read(address & 0xffff) & 0xff

    def write_byte(self, address: int, value: int) -> None:
        """Write a byte to memory, charging one cycle."""
        self.cycles += 1
        self.memory.write(address & 0xffff, value & 0xff)

    def read_word(self, address: int) -> int:
        """Read a little-endian word, charging two cycles."""
        lo = self.read_byte(address)
        hi = self.read_byte(address + 1)
        return (hi << 8) | lo

    def fetch_byte(self) -> int:
        """Read the byte at the program counter and advance it."""
        value = self.read_byte(self.pc)
        self.pc = (self.pc + 1) & 0xffff
        return value

    # Flags

    def get_flag(self, flag_index: int) -> int:
        """Return the flag at `flag_index` of the status register as 0 or 1."""
        return (self.status >> flag_index) & 1

    def set_flag(self, flag_index: int) -> None:  # noqa: D102
        self.status |= (1 << flag_index)

    def clear_flag(self, flag_index: int) -> None:  # noqa: D102
        self.status &= ~(1 << flag_index)

    def put_flag(self, flag_index: int, value: int | bool) -> None:  # noqa: FBT001
        """Set the flag at `flag_index` if `value` is truthy, clear it otherwise."""
        if value:
            self.set_flag(flag_index)
        else:
            self.clear_flag(flag_index)

    def update_zero_flag(self, result: int) -> None:
        """Update the zero (Z) flag of the status register based on the result of an operation.

        Args:
            result: Byte resulting from an operation that updates the status register.

        """
        self.put_flag(self.STATUS_Z, result == 0)

    def update_overflow_flag(self, a_initial: int, operand: int, result: int) -> None:
        """Update the overflow (V) flag of the status register based on the result of an operation.

        Args:
            a_initial: Accumulator value before operation.
            operand: Operand of potentially overflowing operation.
            result: Accumulator value after operation.

        """
        inputs_same_sign = ~(a_initial ^ operand) & 0x80
        result_sign_different_from_inputs = (a_initial ^ result) & 0x80
        self.put_flag(self.STATUS_V, inputs_same_sign & result_sign_different_from_inputs)

    def update_negative_flag(self, result: int) -> None:
        """Update the negative (N) flag of the status register based on the result of an operation.

        Args:
            result: Byte resulting from an operation that updates the status register.

        """
        self.put_flag(self.STATUS_N, (result >> 7) & 0x01)

    def update_zero_and_negative_flags(self, result: int) -> None:
        """Derive Z and N from a result, leaving every other flag alone."""
        self.update_zero_flag(result)
        self.update_negative_flag(result)

    # Addressing

    def resolve_address(self, mode: AddressingMode, operand: int) -> tuple[int, bool]:
        """Resolve the effective address for a given addressing mode.

        Additional address bytes are fetched from the instruction stream and pointers are read from
        memory, all charged as cycles. A page boundary crossed by indexing or branching costs one more
        cycle.

        Args:
            mode: The addressing mode to resolve.
            operand: The operand byte that followed the opcode.

        Returns:
            (addr, page_boundary_crossed): The effective memory address and if a page boundary
            has been crossed by indexing.

        Raises:
            ValueError: For immediate operands, which have no address.

        """
        addr: int
        page_boundary_crossed = False
        match mode:
            case AddressingMode.IMMEDIATE:
                msg = "Immediate operands have no effective address."
                raise ValueError(msg)
            case AddressingMode.ZERO_PAGE:
                addr = operand
            case AddressingMode.ZERO_PAGE_X:
                addr = (operand + self.x) & 0xff
            case AddressingMode.ZERO_PAGE_Y:
                addr = (operand + self.y) & 0xff
            case AddressingMode.ABSOLUTE:
                addr = (self.fetch_byte() << 8) | operand
            case AddressingMode.INDIRECT:
                pointer = (self.fetch_byte() << 8) | operand
                addr = self.read_word(pointer)
            case AddressingMode.ABSOLUTE_X:
                addr, page_boundary_crossed = self._index(self.fetch_byte(), operand, self.x)
            case AddressingMode.ABSOLUTE_Y:
                addr, page_boundary_crossed = self._index(self.fetch_byte(), operand, self.y)
            case AddressingMode.INDIRECT_X:
                addr_zp = (operand + self.x) & 0xff
                addr_indirect_lo = self.read_byte(addr_zp)
                addr_indirect_hi = self.read_byte((addr_zp + 1) & 0xff)
                addr = (addr_indirect_hi << 8) | addr_indirect_lo
            case AddressingMode.INDIRECT_Y:
                addr_base_lo = self.read_byte(operand)
                addr_base_hi = self.read_byte((operand + 1) & 0xff)
                addr, page_boundary_crossed = self._index(addr_base_hi, addr_base_lo, self.y)
            case AddressingMode.RELATIVE:
                offset = operand - 0x100 if operand & 0x80 else operand
                target_lo = (self.pc & 0xff) + offset
                page_boundary_crossed = not (0 <= target_lo <= 0xff)  # noqa: PLR2004
                addr = ((self.pc & 0xff00) + target_lo) & 0xffff
            case _:
                assert_never(mode)

        if page_boundary_crossed:
            self.cycles += 1
        return addr, page_boundary_crossed

    @staticmethod
    def _index(base_hi: int, base_lo: int, index: int) -> tuple[int, bool]:
        """Add an index register to the low byte of a base address."""
        indexed_lo = base_lo + index
        return ((base_hi << 8) + indexed_lo) & 0xffff, indexed_lo > 0xff  # noqa: PLR2004

    def read_operand(self, operand: int, mode: AddressingMode) -> int:
        """Return the value an instruction operates on: the operand itself or the byte it addresses."""
        if mode is AddressingMode.IMMEDIATE:
            return operand
        addr, _ = self.resolve_address(mode, operand)
        return self.read_byte(addr)

    # Stack

    def push_byte_to_stack(self, byte: int) -> None:
        """Push a byte to the stack and update stack pointer.

        Note: This method does not update the status register or perform underflow checks.

        Args:
            byte: Byte to push onto the stack.

        """
        self.write_byte(self.STACK_ROOT + self.sp, byte)
        self.sp = (self.sp - 1) & 0xff

    def pull_byte_from_stack(self) -> int:
        """Pull a byte from the stack and update the stack pointer.

        Note: This method does not update the status register or perform overflow checks.

        Returns:
            byte: Byte pulled from the stack.

        """
        self.sp = (self.sp + 1) & 0xff
        return self.read_byte(self.STACK_ROOT + self.sp)

    def push_word_to_stack(self, word: int) -> None:
        """Push the high byte, then the low byte of `word`."""
        self.push_byte_to_stack((word >> 8) & 0xff)
        self.push_byte_to_stack(word & 0xff)

    def pull_word_from_stack(self) -> int:
        """Pull the low byte, then the high byte of a word."""
        lo = self.pull_byte_from_stack()
        hi = self.pull_byte_from_stack()
        return (hi << 8) | lo

    def _pull_status(self) -> None:
        """Pull the status register, keeping the current B and unused bits."""
        pulled_status = self.pull_byte_from_stack()
        preserved = (1 << self.STATUS_B) | (1 << self.STATUS_U)
        self.status = (pulled_status & ~preserved) | (self.status & preserved)

    # Interrupts

    def _interrupt(self, return_address: int, vector: int, *, brk: bool) -> None:
        """Save the return address and status on the stack and continue at the handler in `vector`."""
        status_to_push = self.status | (1 << self.STATUS_U)
        if brk:
            status_to_push |= (1 << self.STATUS_B)
        else:
            status_to_push &= ~(1 << self.STATUS_B)

        self.push_word_to_stack(return_address)
        self.push_byte_to_stack(status_to_push)
        self.set_flag(self.STATUS_I)
        self.pc = self.read_word(vector)

    def irq(self) -> int:
        """Issue an Interrupt ReQuest (IRQ) to the CPU.

        Must be called in between ticks. The request is ignored while the interrupt disable flag is set.

        Returns:
            cycles: Number of cycles spent entering the interrupt handler.

        """
        if self.get_flag(self.STATUS_I):
            return 0
        self.cycles = 0
        self._interrupt(self.pc, self.IRQ_VECTOR, brk=False)
        self.cycles += self.INTERRUPT_INTERNAL_CYCLES
        return self.cycles

    def nmi(self) -> int:
        """Issue a Non-Maskable Interrupt (NMI) to the CPU, see `irq`."""
        self.cycles = 0
        self._interrupt(self.pc, self.NMI_VECTOR, brk=False)
        self.cycles += self.INTERRUPT_INTERNAL_CYCLES
        return self.cycles

    # Registers

    @staticmethod
    def _check_register(register: Register) -> None:
        if register not in ("a", "x", "y", "sp"):
            msg = f"Invalid register '{register}'."
            raise ValueError(msg)

    def _register_value(self, register: Register) -> int:
        self._check_register(register)
        return getattr(self, register)

    def _set_register(self, register: Register, value: int) -> None:
        self._check_register(register)
        setattr(self, register, value & 0xff)

    # System instructions

    @opcode(0x10, flag_index=STATUS_N, flag_value=0)
    @opcode(0x30, flag_index=STATUS_N, flag_value=1)
    @opcode(0x50, flag_index=STATUS_V, flag_value=0)
    @opcode(0x70, flag_index=STATUS_V, flag_value=1)
    @opcode(0x90, flag_index=STATUS_C, flag_value=0)
    @opcode(0xb0, flag_index=STATUS_C, flag_value=1)
    @opcode(0xd0, flag_index=STATUS_Z, flag_value=0)
    @opcode(0xf0, flag_index=STATUS_Z, flag_value=1)
    def branch(self, operand: int, flag_index: int, flag_value: int) -> None:
        """Branch to relative address if specified flag is set or clear.

        Args:
            operand: Signed offset relative to the address of the next instruction.
            flag_index: Index of the flag in the status register to check.
            flag_value: The value the flag should have for the branch to be taken (0 or 1).

        """
        if self.get_flag(flag_index) == flag_value:
            self.cycles += 1
            self.pc, _ = self.resolve_address(AddressingMode.RELATIVE, operand)

    @opcode(0x00)
    def brk(self) -> None:
        """Execute the BReaK (BRK) instruction.

        BRK is a two byte instruction, the return address skips its padding byte.
        """
        self._interrupt((self.pc + 1) & 0xffff, self.IRQ_VECTOR, brk=True)

    @opcode(0x40)
    def rti(self) -> None:
        """Execute the ReTurn from Interrupt (RTI) instruction."""
        self._pull_status()
        self.pc = self.pull_word_from_stack()

    @opcode(0x4c, mode=AddressingMode.ABSOLUTE)
    @opcode(0x6c, mode=AddressingMode.INDIRECT)
    def jmp(self, operand: int, mode: AddressingMode) -> None:
        """Execute the JuMP (JMP) instruction."""
        self.pc, _ = self.resolve_address(mode, operand)

    @opcode(0x20)
    def jsr(self, operand: int) -> None:
        """Execute the Jump to SubRoutine (JSR) instruction."""
        sr_addr, _ = self.resolve_address(AddressingMode.ABSOLUTE, operand)
        # point to last byte of jsr instruction
        self.push_word_to_stack((self.pc - 1) & 0xffff)
        self.pc = sr_addr

    @opcode(0x60)
    def rts(self) -> None:
        """Execute the ReTurn from Subroutine (RTS) instruction."""
        self.pc = (self.pull_word_from_stack() + 1) & 0xffff

    @opcode(0xea)
    def nop(self) -> None:
        """Execute No OPeration (NOP) instruction."""

    # Flag instructions

    @opcode(0x18)
    def clc(self) -> None:
        """Execute the CLear Carry (CLC) instruction."""
        self.clear_flag(self.STATUS_C)

    @opcode(0x38)
    def sec(self) -> None:
        """Execute the SEt Carry (SEC) instruction."""
        self.set_flag(self.STATUS_C)

    @opcode(0x58)
    def cli(self) -> None:
        """Execute the CLear Interrupt (CLI) instruction."""
        self.clear_flag(self.STATUS_I)

    @opcode(0x78)
    def sei(self) -> None:
        """Execute the SEt Interrupt (SEI) instruction."""
        self.set_flag(self.STATUS_I)

    @opcode(0xd8)
    def cld(self) -> None:
        """Execute the CLear Decimal (CLD) instruction."""
        self.clear_flag(self.STATUS_D)

    @opcode(0xf8)
    def sed(self) -> None:
        """Execute the SEt Decimal (SED) instruction."""
        self.set_flag(self.STATUS_D)

    @opcode(0xb8)
    def clv(self) -> None:
        """Execute the CLear oVerflow (CLV) instruction."""
        self.clear_flag(self.STATUS_V)

    # Register loading and storing

    @opcode(0xa9, register="a", mode=AddressingMode.IMMEDIATE)
    @opcode(0xa5, register="a", mode=AddressingMode.ZERO_PAGE)
    @opcode(0xb5, register="a", mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0xad, register="a", mode=AddressingMode.ABSOLUTE)
    @opcode(0xbd, register="a", mode=AddressingMode.ABSOLUTE_X)
    @opcode(0xb9, register="a", mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0xa1, register="a", mode=AddressingMode.INDIRECT_X)
    @opcode(0xb1, register="a", mode=AddressingMode.INDIRECT_Y)
    @opcode(0xa2, register="x", mode=AddressingMode.IMMEDIATE)
    @opcode(0xa6, register="x", mode=AddressingMode.ZERO_PAGE)
    @opcode(0xb6, register="x", mode=AddressingMode.ZERO_PAGE_Y)
    @opcode(0xae, register="x", mode=AddressingMode.ABSOLUTE)
    @opcode(0xbe, register="x", mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0xa0, register="y", mode=AddressingMode.IMMEDIATE)
    @opcode(0xa4, register="y", mode=AddressingMode.ZERO_PAGE)
    @opcode(0xb4, register="y", mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0xac, register="y", mode=AddressingMode.ABSOLUTE)
    @opcode(0xbc, register="y", mode=AddressingMode.ABSOLUTE_X)
    def load(self, operand: int, register: Register, mode: AddressingMode) -> None:
        """Execute the load instructions (LDA, LDX, LDY)."""
        value = self.read_operand(operand, mode)
        self._set_register(register, value)
        self.update_zero_and_negative_flags(value)

    @opcode(0x85, register="a", mode=AddressingMode.ZERO_PAGE)
    @opcode(0x95, register="a", mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x8d, register="a", mode=AddressingMode.ABSOLUTE)
    @opcode(0x9d, register="a", mode=AddressingMode.ABSOLUTE_X)
    @opcode(0x99, register="a", mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0x81, register="a", mode=AddressingMode.INDIRECT_X)
    @opcode(0x91, register="a", mode=AddressingMode.INDIRECT_Y)
    @opcode(0x86, register="x", mode=AddressingMode.ZERO_PAGE)
    @opcode(0x96, register="x", mode=AddressingMode.ZERO_PAGE_Y)
    @opcode(0x8e, register="x", mode=AddressingMode.ABSOLUTE)
    @opcode(0x84, register="y", mode=AddressingMode.ZERO_PAGE)
    @opcode(0x94, register="y", mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x8c, register="y", mode=AddressingMode.ABSOLUTE)
    def store(self, operand: int, register: Register, mode: AddressingMode) -> None:
        """Execute the store instructions (STA, STX, STY)."""
        addr, _ = self.resolve_address(mode, operand)
        self.write_byte(addr, self._register_value(register))

    # Register transfer

    @opcode(0xaa, source="a", destination="x")
    @opcode(0xa8, source="a", destination="y")
    @opcode(0xba, source="sp", destination="x")
    @opcode(0x8a, source="x", destination="a")
    @opcode(0x98, source="y", destination="a")
    @opcode(0x9a, source="x", destination="sp", update_flags=False)
    def transfer(self, source: Register, destination: Register, update_flags: bool = True) -> None:  # noqa: FBT001, FBT002
        """Execute the transfer instructions (TAX, TAY, TSX, TXA, TYA, TXS).

        All of them but TXS update the zero and negative flags.
        """
        value = self._register_value(source)
        self._set_register(destination, value)
        if update_flags:
            self.update_zero_and_negative_flags(value)

    # Stack instructions

    @opcode(0x48)
    def pha(self) -> None:
        """Execute the PusH Accumulator (PHA) instruction."""
        self.push_byte_to_stack(self.a)

    @opcode(0x08)
    def php(self) -> None:
        """Execute the PusH Processor status (PHP) instruction."""
        self.push_byte_to_stack(self.status | (1 << self.STATUS_B) | (1 << self.STATUS_U))

    @opcode(0x68)
    def pla(self) -> None:
        """Execute the PuLl Accumulator (PLA) instruction."""
        self.a = self.pull_byte_from_stack()
        self.update_zero_and_negative_flags(self.a)

    @opcode(0x28)
    def plp(self) -> None:
        """Execute the PuLl Processor status (PLP) instruction."""
        self._pull_status()

    # Unary arithmetic

    def _step_memory(self, operand: int, mode: AddressingMode, delta: int) -> None:
        addr, _ = self.resolve_address(mode, operand)
        byte = (self.read_byte(addr) + delta) & 0xff
        self.write_byte(addr, byte)
        self.update_zero_and_negative_flags(byte)

    def _step_register(self, register: Register, delta: int) -> None:
        byte = (self._register_value(register) + delta) & 0xff
        self._set_register(register, byte)
        self.update_zero_and_negative_flags(byte)

    @opcode(0xc6, mode=AddressingMode.ZERO_PAGE)
    @opcode(0xd6, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0xce, mode=AddressingMode.ABSOLUTE)
    @opcode(0xde, mode=AddressingMode.ABSOLUTE_X)
    def dec(self, operand: int, mode: AddressingMode) -> None:
        """Execute the DECrement (DEC) instruction."""
        self._step_memory(operand, mode, -1)

    @opcode(0xca)
    def dex(self) -> None:
        """Execute the DEcrement X (DEX) instruction."""
        self._step_register("x", -1)

    @opcode(0x88)
    def dey(self) -> None:
        """Execute the DEcrement Y (DEY) instruction."""
        self._step_register("y", -1)

    @opcode(0xe6, mode=AddressingMode.ZERO_PAGE)
    @opcode(0xf6, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0xee, mode=AddressingMode.ABSOLUTE)
    @opcode(0xfe, mode=AddressingMode.ABSOLUTE_X)
    def inc(self, operand: int, mode: AddressingMode) -> None:
        """Execute the INCrement (INC) instruction."""
        self._step_memory(operand, mode, 1)

    @opcode(0xe8)
    def inx(self) -> None:
        """Execute the INcrement X (INX) instruction."""
        self._step_register("x", 1)

    @opcode(0xc8)
    def iny(self) -> None:
        """Execute the INcrement Y (INY) instruction."""
        self._step_register("y", 1)

    def _shift(self, operand: int, mode: AddressingMode | None, shift: Callable[[int], tuple[int, int]]) -> None:
        """Apply `shift` to the accumulator (`mode` is None) or to a memory cell.

        `shift` maps the old value to the new value and the bit shifted out, which becomes the carry.
        """
        addr = None
        if mode is None:
            value = self.a
        else:
            addr, _ = self.resolve_address(mode, operand)
            value = self.read_byte(addr)

        value, carry = shift(value)

        if addr is None:
            self.a = value
        else:
            self.write_byte(addr, value)

        self.put_flag(self.STATUS_C, carry)
        self.update_zero_and_negative_flags(value)

    @opcode(0x0a)
    @opcode(0x06, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x16, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x0e, mode=AddressingMode.ABSOLUTE)
    @opcode(0x1e, mode=AddressingMode.ABSOLUTE_X)
    def asl(self, operand: int = 0, mode: AddressingMode | None = None) -> None:
        """Execute the Arithmetic Shift Left (ASL) instruction.

        If `mode` is None, ASL is performed on the accumulator.
        """
        self._shift(operand, mode, lambda value: ((value << 1) & 0xff, (value >> 7) & 1))

    @opcode(0x4a)
    @opcode(0x46, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x56, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x4e, mode=AddressingMode.ABSOLUTE)
    @opcode(0x5e, mode=AddressingMode.ABSOLUTE_X)
    def lsr(self, operand: int = 0, mode: AddressingMode | None = None) -> None:
        """Execute the Logic Shift Right (LSR) instruction.

        If `mode` is None, LSR is performed on the accumulator.
        """
        self._shift(operand, mode, lambda value: (value >> 1, value & 1))

    @opcode(0x2a)
    @opcode(0x26, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x36, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x2e, mode=AddressingMode.ABSOLUTE)
    @opcode(0x3e, mode=AddressingMode.ABSOLUTE_X)
    def rol(self, operand: int = 0, mode: AddressingMode | None = None) -> None:
        """Execute the Rotate Left (ROL) instruction.

        If `mode` is None, ROL is performed on the accumulator.
        """
        buffer = self.get_flag(self.STATUS_C)
        self._shift(operand, mode, lambda value: ((value << 1 | buffer) & 0xff, (value >> 7) & 1))

    @opcode(0x6a)
    @opcode(0x66, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x76, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x6e, mode=AddressingMode.ABSOLUTE)
    @opcode(0x7e, mode=AddressingMode.ABSOLUTE_X)
    def ror(self, operand: int = 0, mode: AddressingMode | None = None) -> None:
        """Execute the Rotate Right (ROR) instruction.

        If `mode` is None, ROR is performed on the accumulator.
        """
        buffer = self.get_flag(self.STATUS_C)
        self._shift(operand, mode, lambda value: (((buffer << 8) | value) >> 1, value & 1))

    # Binary arithmetic

    def add_with_carry(self, value: int, subtract: bool = False) -> None:  # noqa: FBT001, FBT002
        """Add `value` and the carry to the accumulator, honoring decimal mode.

        Subtraction adds the complement of `value`: the ones' complement in binary mode and the nines'
        complement in decimal mode, so a set carry means "no borrow" in both.
        """
        a_initial = self.a
        carry_in = self.get_flag(self.STATUS_C)
        addend = ~value & 0xff if subtract else value

        if self.get_flag(self.STATUS_D):
            value_dec = bcd_to_dec(value)
            if subtract:
                value_dec = 99 - value_dec
            intermediate_sum = bcd_to_dec(a_initial) + value_dec + carry_in
            carry_out = intermediate_sum > 99  # noqa: PLR2004
            result = dec_to_bcd(intermediate_sum % 100)
        else:
            intermediate_sum = a_initial + addend + carry_in
            carry_out = intermediate_sum > 0xff  # noqa: PLR2004
            result = intermediate_sum & 0xff

        self.a = result
        self.put_flag(self.STATUS_C, carry_out)
        self.update_overflow_flag(a_initial, addend, result)
        self.update_zero_and_negative_flags(result)

    @opcode(0x69, mode=AddressingMode.IMMEDIATE)
    @opcode(0x65, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x75, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x6d, mode=AddressingMode.ABSOLUTE)
    @opcode(0x7d, mode=AddressingMode.ABSOLUTE_X)
    @opcode(0x79, mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0x61, mode=AddressingMode.INDIRECT_X)
    @opcode(0x71, mode=AddressingMode.INDIRECT_Y)
    def adc(self, operand: int, mode: AddressingMode) -> None:
        """Execute the ADd with Carry (ADC) instruction."""
        self.add_with_carry(self.read_operand(operand, mode))

    @opcode(0xe9, mode=AddressingMode.IMMEDIATE)
    @opcode(0xe5, mode=AddressingMode.ZERO_PAGE)
    @opcode(0xf5, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0xed, mode=AddressingMode.ABSOLUTE)
    @opcode(0xfd, mode=AddressingMode.ABSOLUTE_X)
    @opcode(0xf9, mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0xe1, mode=AddressingMode.INDIRECT_X)
    @opcode(0xf1, mode=AddressingMode.INDIRECT_Y)
    def sbc(self, operand: int, mode: AddressingMode) -> None:
        """Execute the SuBtract with Carry / borrow (SBC) instruction."""
        self.add_with_carry(self.read_operand(operand, mode), subtract=True)

    # Binary logic

    @opcode(0x29, mode=AddressingMode.IMMEDIATE)
    @opcode(0x25, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x35, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x2d, mode=AddressingMode.ABSOLUTE)
    @opcode(0x3d, mode=AddressingMode.ABSOLUTE_X)
    @opcode(0x39, mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0x21, mode=AddressingMode.INDIRECT_X)
    @opcode(0x31, mode=AddressingMode.INDIRECT_Y)
    def and_op(self, operand: int, mode: AddressingMode) -> None:
        """Execute the AND instruction."""
        self.a &= self.read_operand(operand, mode)
        self.update_zero_and_negative_flags(self.a)

    @opcode(0x49, mode=AddressingMode.IMMEDIATE)
    @opcode(0x45, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x55, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x4d, mode=AddressingMode.ABSOLUTE)
    @opcode(0x5d, mode=AddressingMode.ABSOLUTE_X)
    @opcode(0x59, mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0x41, mode=AddressingMode.INDIRECT_X)
    @opcode(0x51, mode=AddressingMode.INDIRECT_Y)
    def eor(self, operand: int, mode: AddressingMode) -> None:
        """Execute the Exclusive OR instruction."""
        self.a ^= self.read_operand(operand, mode)
        self.update_zero_and_negative_flags(self.a)

    @opcode(0x09, mode=AddressingMode.IMMEDIATE)
    @opcode(0x05, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x15, mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0x0d, mode=AddressingMode.ABSOLUTE)
    @opcode(0x1d, mode=AddressingMode.ABSOLUTE_X)
    @opcode(0x19, mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0x01, mode=AddressingMode.INDIRECT_X)
    @opcode(0x11, mode=AddressingMode.INDIRECT_Y)
    def ora(self, operand: int, mode: AddressingMode) -> None:
        """Execute the OR with Accumulator instruction."""
        self.a |= self.read_operand(operand, mode)
        self.update_zero_and_negative_flags(self.a)

    @opcode(0x24, mode=AddressingMode.ZERO_PAGE)
    @opcode(0x2c, mode=AddressingMode.ABSOLUTE)
    def bit(self, operand: int, mode: AddressingMode) -> None:
        """Execute the BIT test (BIT) instruction."""
        value = self.read_operand(operand, mode)
        self.put_flag(self.STATUS_N, (value >> 7) & 1)
        self.put_flag(self.STATUS_V, (value >> 6) & 1)
        self.update_zero_flag(value & self.a)

    @opcode(0xc9, register="a", mode=AddressingMode.IMMEDIATE)
    @opcode(0xc5, register="a", mode=AddressingMode.ZERO_PAGE)
    @opcode(0xd5, register="a", mode=AddressingMode.ZERO_PAGE_X)
    @opcode(0xcd, register="a", mode=AddressingMode.ABSOLUTE)
    @opcode(0xdd, register="a", mode=AddressingMode.ABSOLUTE_X)
    @opcode(0xd9, register="a", mode=AddressingMode.ABSOLUTE_Y)
    @opcode(0xc1, register="a", mode=AddressingMode.INDIRECT_X)
    @opcode(0xd1, register="a", mode=AddressingMode.INDIRECT_Y)
    @opcode(0xe0, register="x", mode=AddressingMode.IMMEDIATE)
    @opcode(0xe4, register="x", mode=AddressingMode.ZERO_PAGE)
    @opcode(0xec, register="x", mode=AddressingMode.ABSOLUTE)
    @opcode(0xc0, register="y", mode=AddressingMode.IMMEDIATE)
    @opcode(0xc4, register="y", mode=AddressingMode.ZERO_PAGE)
    @opcode(0xcc, register="y", mode=AddressingMode.ABSOLUTE)
    def compare(self, operand: int, register: Register, mode: AddressingMode) -> None:
        """Execute the compare instruction (CMP, CPX, CPY)."""
        register_value = self._register_value(register)
        value = self.read_operand(operand, mode)

        self.put_flag(self.STATUS_C, register_value >= value)
        self.update_zero_and_negative_flags((register_value - value) & 0xff)
