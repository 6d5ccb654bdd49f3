"""Generate a Hello World output message."""  # noqa: INP001

from mos6502.cli import ROM_START, build_console_machine
from mos6502.cpu import CPU6502
from mos6502.runner import run

# .ORG $8000
#
# ; terminal output
# TERMOUT = $7000
#
# JMP START
#
# ; data section
#
# MSG:
#         .ASCII "Hello, World!"
#         .BYTE $0A ; newline
# MSG_END:
#
# ; text section
#
# START:
#         LDX #0
# !       LDA MSG,X
#         STA TERMOUT
#         INX
#         CPX #MSG_END-MSG
#         BNE !-
# HALT:   JMP HALT
program = bytes.fromhex("""
4C 11 80 48 65 6C 6C 6F
2C 20 57 6F 72 6C 64 21
0A A2 00 BD 03 80 8D 00
70 E8 E0 0E D0 F5 4C 1E
80
""")


if __name__ == "__main__":
    rom = bytearray(0x10000 - ROM_START)
    rom[:len(program)] = program
    rom[0xfffc - ROM_START:0xfffe - ROM_START] = ROM_START.to_bytes(2, "little")
    memory_map, _ = build_console_machine(bytes(rom))

    cpu = CPU6502(memory_map)
    run(cpu)
