"""Run Klaus Dormann's 6502 functional test when a binary of it is available.

Point `MOS6502_FUNCTIONAL_TEST` to `6502_functional_test.bin`, assembled with decimal mode tests
disabled. `MOS6502_FUNCTIONAL_TEST_SUCCESS` overrides the address of the success trap.
"""

import os
from pathlib import Path

import pytest

from mos6502.cli import FUNCTIONAL_TEST_START, load_image, parse_address
from mos6502.cpu import CPU6502
from mos6502.memory import MemoryBlock
from mos6502.runner import run

IMAGE = os.environ.get("MOS6502_FUNCTIONAL_TEST")
SUCCESS = parse_address(os.environ.get("MOS6502_FUNCTIONAL_TEST_SUCCESS", "$3469"))


@pytest.mark.skipif(IMAGE is None, reason="MOS6502_FUNCTIONAL_TEST is not set")
def test_functional_test_reaches_success_trap():  # noqa: D103
    assert IMAGE is not None
    memory = MemoryBlock()
    memory.write_bytes(0, load_image(Path(IMAGE)))
    cpu = CPU6502(memory)
    cpu.set_program_counter(FUNCTIONAL_TEST_START)

    result = run(cpu, max_steps=None)

    assert result.trapped_at == SUCCESS, f"trapped at ${result.trapped_at:04x}, {cpu.snapshot()}"
