"""Command-line entry point for running 6502 programs."""

import argparse
import logging
import sys
import termios
import threading
from pathlib import Path
from typing import BinaryIO

from mos6502.cpu import CPU6502, InvalidOpcodeError
from mos6502.memory import MemoryBlock, MemoryMap, ReadOnlyMemory
from mos6502.peripherals import TerminalPeripheral, monitor_stdin
from mos6502.runner import RunResult, run

logger = logging.getLogger(__name__)

# Console machine layout
RAM_END = 0x6fff
TERMINAL_START = 0x7000
TERMINAL_END = 0x7fff
ROM_START = 0x8000

DEFAULT_HZ = 1_000_000
FUNCTIONAL_TEST_START = 0x0400
STACK_PAGE = 0x0100

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_address(text: str) -> int:
    """Parse a 16 bit address given as `0x` or `$` prefixed hexadecimal or as decimal number."""
    try:
        if text.startswith("$"):
            value = int(text[1:], 16)
        elif text.lower().startswith("0x"):
            value = int(text, 16)
        else:
            value = int(text)
    except ValueError:
        msg = f"invalid address: {text!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if not (0 <= value <= 0xffff):  # noqa: PLR2004
        msg = f"address out of range: {text!r}"
        raise argparse.ArgumentTypeError(msg)
    return value


def load_image(path: Path) -> bytes:
    """Read a raw binary image without any header."""
    with path.open("rb") as f:
        return f.read()


def build_console_machine(rom_image: bytes, output: BinaryIO | None = None) -> tuple[MemoryMap, TerminalPeripheral]:
    """Assemble RAM, a terminal and a ROM holding `rom_image` into one memory map.

    Raises:
        ValueError: If the image does not fit into the ROM window.

    """
    terminal = TerminalPeripheral(size=TERMINAL_END - TERMINAL_START + 1, output=output)
    memory_map = (MemoryMap()
        .add_block(0x0000, MemoryBlock(RAM_END + 1))
        .add_block(TERMINAL_START, terminal, TERMINAL_END)
        .add_block(ROM_START, ReadOnlyMemory(rom_image, size=0x10000 - ROM_START)))
    return memory_map, terminal


def format_hex_dump(data: bytes, base: int) -> str:
    """Format `data` as lines of 16 bytes, each prefixed with its address."""
    lines = []
    for offset in range(0, len(data), 16):
        chunk = data[offset:offset + 16]
        lines.append(f"{base + offset:04x}: " + " ".join(f"{b:02x}" for b in chunk))
    return "\n".join(lines)


def build_arg_parser() -> argparse.ArgumentParser:  # noqa: D103
    parser = argparse.ArgumentParser(
        prog="mos6502",
        description="Behavioral MOS 6502 emulator",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log run summaries")
    parser.add_argument("--debug", action="store_true", help="Log everything, including unmapped memory accesses")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a ROM on a machine with RAM and a terminal")
    run_parser.add_argument("rom", type=Path, help="Raw ROM image of up to 32 KiB, mapped to $8000")
    run_parser.add_argument(
        "--hz",
        type=int,
        default=DEFAULT_HZ,
        help=f"Emulated clock rate, 0 runs unpaced (default: {DEFAULT_HZ})",
    )
    run_parser.add_argument("--max-steps", type=int, default=None, help="Abort after this many instructions")
    run_parser.add_argument("--trace", action="store_true", help="Log every instruction (implies --verbose)")

    test_parser = subparsers.add_parser("functional-test", help="Run a test image until it traps")
    test_parser.add_argument("image", type=Path, help="Raw 64 KiB memory image loaded at $0000")
    test_parser.add_argument(
        "--start",
        type=parse_address,
        default=FUNCTIONAL_TEST_START,
        help=f"Address to start execution at (default: ${FUNCTIONAL_TEST_START:04x})",
    )
    test_parser.add_argument("--success", type=parse_address, default=None, help="Trap address that means success")
    test_parser.add_argument("--max-steps", type=int, default=None, help="Abort after this many instructions")
    test_parser.add_argument("--trace", action="store_true", help="Log every instruction (implies --verbose)")

    return parser


def configure_logging(verbose: bool, debug: bool) -> None:  # noqa: FBT001
    """Send log records to stderr at the level selected on the command line."""
    level = logging.WARNING
    if verbose:
        level = logging.INFO
    if debug:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT)


def run_console(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """Run a ROM on the console machine, forwarding stdin to the terminal."""
    try:
        memory_map, terminal = build_console_machine(load_image(args.rom))
    except ValueError as exc:
        parser.error(str(exc))

    cpu = CPU6502(memory_map)
    stop_event = threading.Event()
    monitor = None
    saved_settings = None
    if sys.stdin.isatty():
        saved_settings = termios.tcgetattr(sys.stdin.fileno())
        monitor = threading.Thread(target=monitor_stdin, args=(terminal, stop_event))
        monitor.start()

    try:
        run(
            cpu,
            max_steps=args.max_steps,
            cycles_per_second=args.hz or None,
            trace=args.trace,
            should_stop=stop_event.is_set,
        )
    finally:
        stop_event.set()
        if monitor is not None:
            monitor.join()
        if saved_settings is not None:
            termios.tcsetattr(sys.stdin.fileno(), termios.TCSADRAIN, saved_settings)
    return 0


def run_functional_test(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """Run a full memory image from `--start` and report where it trapped."""
    image = load_image(args.image)
    memory = MemoryBlock()
    try:
        memory.write_bytes(0, image)
    except IndexError:
        parser.error(f"image of {len(image)} bytes exceeds 64 KiB: {args.image}")

    cpu = CPU6502(memory)
    cpu.set_program_counter(args.start)
    result: RunResult = run(cpu, max_steps=args.max_steps, trace=args.trace)

    print(f"Trapped at ${result.trapped_at:04x} after {result.steps} instructions")
    print(
        f"{result.cycles} cycles in {result.elapsed:.3f} s, "
        f"effective clock {result.effective_hz / 1e6:.3f} MHz",
    )
    print(f"Registers: {cpu.snapshot()}")
    print("Stack page:")
    print(format_hex_dump(bytes(memory.mem[STACK_PAGE:STACK_PAGE + 0x100]), STACK_PAGE))

    if args.success is None:
        return 0
    if result.trapped_at == args.success:
        print("PASSED")
        return 0
    print(f"FAILED, expected trap at ${args.success:04x}")
    return 1


def main(argv: list[str] | None = None) -> int:  # noqa: D103
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose or args.trace, args.debug)

    image_path: Path = args.rom if args.command == "run" else args.image
    if not image_path.is_file():
        parser.error(f"Image file not found: {image_path}")

    try:
        if args.command == "run":
            return run_console(args, parser)
        return run_functional_test(args, parser)
    except InvalidOpcodeError as exc:
        logger.error(f"Emulation stopped: {exc}")  # noqa: TRY400
        return 1
    except RuntimeError as exc:
        parser.exit(1, f"mos6502: {exc}\n")


if __name__ == "__main__":
    sys.exit(main())
