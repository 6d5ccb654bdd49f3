"""Run loop that drives a CPU at full speed or paced to a clock rate."""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from mos6502.cpu import CPU6502

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    """Outcome of `run`."""

    steps: int
    cycles: int
    elapsed: float
    """Wall-clock seconds, as measured by the clock passed to `run`."""

    trapped_at: int | None = None
    """Address of the instruction that jumped onto itself, None if the run was stopped from outside."""

    @property
    def effective_hz(self) -> float:
        """Emulated cycles per second of wall-clock time."""
        if self.elapsed <= 0:
            return 0.0
        return self.cycles / self.elapsed


def run(  # noqa: PLR0913
    cpu: CPU6502,
    max_steps: int | None = 10_000,
    cycles_per_second: float | None = None,
    *,
    trace: bool = False,
    should_stop: Callable[[], bool] | None = None,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
    poll_interval: float = 0.001,
) -> RunResult:
    """Let a CPU run it's program until it traps.

    A program traps by executing an instruction that leaves the program counter where it was, e.g. a
    `JMP` onto itself.

    Args:
        cpu: CPU to let run.
        max_steps: Maximum number of instructions to execute. If set to None there is no limit on number of
            instructions.
        cycles_per_second: Emulated clock rate. If set to None the CPU runs as fast as possible.
        trace: Log every executed instruction.
        should_stop: Polled before every instruction, the run ends as soon as it returns True.
        clock: Source of wall-clock time in seconds.
        sleep: Called with `poll_interval` while the CPU is ahead of the emulated clock.
        poll_interval: Seconds to wait before checking the clock again.

    Raises:
        RuntimeError: When maximum number of steps is reached.
        InvalidOpcodeError: When the CPU hits a byte that is not an instruction.

    """
    steps = 0
    cycles = 0
    start = clock()
    while True:
        if should_stop is not None and should_stop():
            logger.info(f"Stopped after {steps} steps and {cycles} cycles.")
            return RunResult(steps, cycles, clock() - start)

        if cycles_per_second:
            budget = (clock() - start) * cycles_per_second
            if cycles > budget:
                sleep(poll_interval)
                continue

        pc_before = cpu.pc
        cycles += cpu.tick(trace=trace)
        steps += 1

        if cpu.pc == pc_before:
            result = RunResult(steps, cycles, clock() - start, trapped_at=pc_before)
            logger.info(f"Trapped at ${pc_before:04x} after {steps} steps and {cycles} cycles.")
            return result

        if max_steps is not None and steps >= max_steps:
            msg = "Maximum number of steps reached."
            raise RuntimeError(msg)
