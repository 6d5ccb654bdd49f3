"""Test instructions for transferring values between registers, i.e., TAX, TAY, TSX, TXA, TXS, and TYA."""

import pytest

from mos6502.cpu import CPU6502
from tests.unit.cpu import TEST_VALUE, flag, load_program


@pytest.mark.parametrize(
    ("opcode", "source", "destination"),
    [
        (0xaa, "a", "x"),
        (0xa8, "a", "y"),
        (0xba, "sp", "x"),
        (0x8a, "x", "a"),
        (0x98, "y", "a"),
    ],
    ids=["tax", "tay", "tsx", "txa", "tya"],
)
def test_transfer(cpu: CPU6502, opcode: int, source: str, destination: str):  # noqa: D103
    setattr(cpu, source, TEST_VALUE)
    load_program(cpu, f"{opcode:02x}")

    assert cpu.tick() == 2
    assert getattr(cpu, destination) == TEST_VALUE
    assert getattr(cpu, source) == TEST_VALUE
    assert flag(cpu, CPU6502.STATUS_N) == 1
    assert flag(cpu, CPU6502.STATUS_Z) == 0


def test_txs_leaves_flags_alone(cpu: CPU6502):  # noqa: D103
    cpu.x = 0x00
    cpu.sp = 0xff
    load_program(cpu, "9a")

    assert cpu.tick() == 2
    assert cpu.sp == 0x00
    assert cpu.status == 0


@pytest.mark.parametrize(
    ("source", "destination"),
    [("pc", "a"), ("a", "pc"), ("a", "status")],
)
def test_transfer_rejects_unknown_registers(cpu: CPU6502, source: str, destination: str):  # noqa: D103
    cpu.a = TEST_VALUE
    cpu.pc = 0x1234
    with pytest.raises(ValueError, match="Invalid register"):
        cpu.transfer(source, destination)  # type: ignore[arg-type]

    assert cpu.a == TEST_VALUE
    assert cpu.pc == 0x1234
    assert cpu.status == 0
