"""Collection of common peripherals for emulated systems."""

import logging
import os
import queue
import select
import sys
import termios
import threading
import tty
from typing import BinaryIO

if sys.version_info >= (3, 12):
    from typing import override
else:
    from typing_extensions import override

from mos6502.memory import Memory

logger = logging.getLogger(__name__)

CTRL_C = b"\x03"


class TerminalPeripheral(Memory):
    """Peripheral that allows the emulated system to interact with input and output streams.

    Every address of the peripheral behaves the same: a read pops the oldest pending input byte (0 if
    nothing is pending) and a write emits the byte to the output stream.
    """

    def __init__(self, size: int = 0x1000, output: BinaryIO | None = None) -> None:
        """Initialize the peripheral.

        Args:
            size: Number of addresses the peripheral occupies in a memory map.
            output: Binary stream receiving written bytes. Defaults to stdout.

        """
        super().__init__()
        self.size = size
        self.output = output if output is not None else sys.stdout.buffer
        self._input_buffer: queue.Queue[int] = queue.Queue()

    def receive_input(self, data: bytes) -> None:
        """Queue bytes to be read by the emulated system. Safe to call from any thread."""
        for byte in data:
            self._input_buffer.put(byte)

    @override
    def __len__(self) -> int:
        return self.size

    @override
    def read(self, address: int) -> int:
        try:
            return self._input_buffer.get_nowait()
        except queue.Empty:
            return 0

    @override
    def write(self, address: int, value: int) -> None:
        self.output.write(bytes([value & 0xff]))
        self.output.flush()


def monitor_stdin(terminal: TerminalPeripheral, stop_event: threading.Event, poll_interval: float = 0.05) -> None:
    """Set terminal to raw mode and forward incoming bytes on stdin to `terminal`.

    Returns once `stop_event` is set, checking it at least every `poll_interval` seconds. When this function
    receives a Ctrl+C (0x03) it sets `stop_event` itself. The terminal is restored to its previous state on the
    way out, also when an exception occurs.
    """
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        # TCSANOW keeps input that arrived before the switch
        tty.setraw(fd, termios.TCSANOW)
        while not stop_event.is_set():
            ready, _, _ = select.select([fd], [], [], poll_interval)
            if not ready:
                continue
            ch = os.read(fd, 1)
            if not ch:
                logger.info("Reached end of input.")
                return
            if ch == CTRL_C:
                stop_event.set()
                return
            terminal.receive_input(ch)
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
