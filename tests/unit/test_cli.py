"""Test the command-line front end."""

import argparse
import io
import logging
import os
import sys
import termios
import threading
from pathlib import Path

import pytest

from mos6502 import cli

HELLO_ROM = (
    "a9 48"     # $8000: LDA #'H'
    "8d 00 70"  # $8002: STA $7000
    "a9 69"     # $8005: LDA #'i'
    "8d 00 70"  # $8007: STA $7000
    "4c 0a 80"  # $800a: JMP $800a
)


def write_rom(path: Path, program: str) -> Path:
    """Write a 32K ROM image with `program` at $8000 and the reset vector pointing to it."""
    rom = bytearray(0x8000)
    code = bytes.fromhex(program)
    rom[:len(code)] = code
    rom[0x7ffc:0x7ffe] = b"\x00\x80"
    path.write_bytes(rom)
    return path


def write_test_image(path: Path, program: str, start: int = cli.FUNCTIONAL_TEST_START) -> Path:
    """Write a 64K memory image with `program` at `start`."""
    image = bytearray(0x10000)
    code = bytes.fromhex(program)
    image[start:start + len(code)] = code
    path.write_bytes(image)
    return path


@pytest.fixture(autouse=True)
def _restore_logging():
    """Undo the handler `main` installs on the root logger."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.parametrize(
    ("text", "address"),
    [("0x0400", 0x0400), ("$3469", 0x3469), ("1024", 1024), ("0XFFFF", 0xffff)],
)
def test_parse_address(text: str, address: int):  # noqa: D103
    assert cli.parse_address(text) == address


@pytest.mark.parametrize("text", ["$", "0x10000", "-1", "nope"])
def test_parse_address_rejects(text: str):  # noqa: D103
    with pytest.raises(argparse.ArgumentTypeError):
        cli.parse_address(text)


def test_format_hex_dump():  # noqa: D103
    dump = cli.format_hex_dump(bytes(range(18)), 0x0100)
    assert dump.splitlines() == [
        "0100: 00 01 02 03 04 05 06 07 08 09 0a 0b 0c 0d 0e 0f",
        "0110: 10 11",
    ]


def test_console_machine_layout():  # noqa: D103
    output = io.BytesIO()
    memory_map, terminal = cli.build_console_machine(b"\xea", output=output)
    terminal.receive_input(b"x")

    memory_map.write(cli.RAM_END, 0x42)
    memory_map.write(cli.TERMINAL_END, ord("!"))
    memory_map.write(cli.ROM_START, 0x00)

    assert memory_map.read(cli.RAM_END) == 0x42
    assert memory_map.read(cli.TERMINAL_START) == ord("x")
    assert memory_map.read(cli.ROM_START) == 0xea
    assert output.getvalue() == b"!"
    assert len(memory_map) == 0x10000


def test_console_machine_rejects_oversized_rom():  # noqa: D103
    with pytest.raises(ValueError, match="does not fit"):
        cli.build_console_machine(bytes(0x8001))


def test_functional_test_success(tmp_path: Path, capsys: pytest.CaptureFixture[str]):  # noqa: D103
    image = write_test_image(tmp_path / "test.bin", "a9 01 4c 02 04")
    assert cli.main(["functional-test", str(image), "--success", "$0402"]) == 0

    out = capsys.readouterr().out
    assert "Trapped at $0402 after 2 instructions" in out
    assert "5 cycles" in out
    assert "0100: 00" in out
    assert "PASSED" in out


def test_functional_test_wrong_trap(tmp_path: Path, capsys: pytest.CaptureFixture[str]):  # noqa: D103
    image = write_test_image(tmp_path / "test.bin", "4c 00 04")
    assert cli.main(["functional-test", str(image), "--success", "0x3469"]) == 1
    assert "FAILED" in capsys.readouterr().out


def test_functional_test_start_address(tmp_path: Path, capsys: pytest.CaptureFixture[str]):  # noqa: D103
    image = write_test_image(tmp_path / "test.bin", "4c 00 10", start=0x1000)
    assert cli.main(["functional-test", str(image), "--start", "0x1000"]) == 0
    assert "Trapped at $1000" in capsys.readouterr().out


def test_functional_test_invalid_opcode(tmp_path: Path, caplog: pytest.LogCaptureFixture):  # noqa: D103
    image = write_test_image(tmp_path / "test.bin", "ea 02")
    assert cli.main(["functional-test", str(image)]) == 1
    assert "Invalid opcode 0x02 at $0401" in caplog.text


def test_functional_test_step_limit(tmp_path: Path):  # noqa: D103
    image = write_test_image(tmp_path / "test.bin", "4c 03 04 4c 00 04")
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["functional-test", str(image), "--max-steps", "5"])
    assert exc_info.value.code == 1


def test_missing_image(tmp_path: Path):  # noqa: D103
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["functional-test", str(tmp_path / "missing.bin")])
    assert exc_info.value.code == 2


def test_run_console_rom(  # noqa: D103
    tmp_path: Path,
    capsysbinary: pytest.CaptureFixture[bytes],
    monkeypatch: pytest.MonkeyPatch,
):
    monkeypatch.setattr("sys.stdin", io.StringIO())
    rom = write_rom(tmp_path / "hello.rom", HELLO_ROM)

    assert cli.main(["run", str(rom), "--hz", "0"]) == 0
    assert capsysbinary.readouterr().out == b"Hi"


def test_run_rejects_oversized_rom(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):  # noqa: D103
    monkeypatch.setattr("sys.stdin", io.StringIO())
    rom = tmp_path / "big.rom"
    rom.write_bytes(bytes(0x8001))
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["run", str(rom)])
    assert exc_info.value.code == 2


@pytest.mark.skipif(not sys.platform.startswith("linux"), reason="needs a pseudo terminal")
def test_run_console_restores_terminal(  # noqa: D103
    tmp_path: Path,
    capsysbinary: pytest.CaptureFixture[bytes],
    monkeypatch: pytest.MonkeyPatch,
):
    controller_fd, terminal_fd = os.openpty()
    stdin = os.fdopen(terminal_fd, "r")
    monkeypatch.setattr("sys.stdin", stdin)
    settings_before = termios.tcgetattr(terminal_fd)
    threads_before = threading.active_count()
    rom = write_rom(tmp_path / "hello.rom", HELLO_ROM)
    try:
        assert cli.main(["run", str(rom), "--hz", "0"]) == 0

        assert threading.active_count() == threads_before
        assert termios.tcgetattr(terminal_fd) == settings_before
    finally:
        stdin.close()
        os.close(controller_fd)
    assert capsysbinary.readouterr().out == b"Hi"
