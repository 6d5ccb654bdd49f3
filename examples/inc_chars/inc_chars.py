"""Echo typed characters back into stdout, each one shifted to the next character."""  # noqa: INP001

import sys
import termios
import threading

from mos6502.cli import ROM_START, build_console_machine
from mos6502.cpu import CPU6502
from mos6502.peripherals import monitor_stdin
from mos6502.runner import run

# .ORG $8000
#
# TERMIO = $7000
#
# LOOP:   LDA TERMIO
#         BEQ LOOP
#         CLC
#         ADC #1
#         STA TERMIO
#         JMP LOOP
program = bytes.fromhex("""
AD 00 70 F0 FB 18 69 01
8D 00 70 4C 00 80
""")


if __name__ == "__main__":
    rom = bytearray(0x10000 - ROM_START)
    rom[:len(program)] = program
    rom[0xfffc - ROM_START:0xfffe - ROM_START] = ROM_START.to_bytes(2, "little")
    memory_map, terminal = build_console_machine(bytes(rom))

    fd = sys.stdin.fileno()
    saved_settings = termios.tcgetattr(fd)
    stop_event = threading.Event()
    monitor = threading.Thread(target=monitor_stdin, args=(terminal, stop_event))
    monitor.start()

    cpu = CPU6502(memory_map)
    try:
        run(cpu, max_steps=None, cycles_per_second=1_000_000, should_stop=stop_event.is_set)
    finally:
        stop_event.set()
        monitor.join()
        termios.tcsetattr(fd, termios.TCSADRAIN, saved_settings)
