# tests/test_cli.py
"""
コマンドラインエントリポイントの終了コードとイメージ保存の検証。
"""
import io

import pytest

from retro_evm import cli
from retro_evm.arch.evm.bootstrap import KEXIT
from retro_evm.arch.evm.opcodes import Opcode
from retro_evm.arch.evm.operand import encode_literal as num_, encode_reference as addr_
from retro_evm.arch.evm.state import IoChannel
from retro_evm.config.models import SystemConfig
from retro_evm.loader.image import ImageLoader, ImageWriter, MachineImage

KERNEL = [0x02, 0x0C, 0x04, 0x08, 0x01, 0x04, 0x05, 0x06]


@pytest.fixture
def stdin(monkeypatch):
    def feed(text):
        data = text if isinstance(text, bytes) else text.encode("ascii")
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(data)))
    return feed


def _boot_input(a, b):
    return " ".join(str(w) for w in [64, len(KERNEL)] + KERNEL + [a, b])


def test_parser_options():
    args = cli.build_parser().parse_args(["-l", "in.img", "-s", "out.img", "-d", "--no-pause"])
    assert args.load == "in.img"
    assert args.save == "out.img"
    assert args.debug and args.no_pause


def test_run_bootstrap_and_save(stdin, capsys, tmp_path):
    stdin(_boot_input(3, 5))
    saved = tmp_path / "out.img"

    assert cli.main(["-s", str(saved)]) == cli.EXIT_OK

    assert capsys.readouterr().out == "8\n"
    image = ImageLoader().load_image(str(saved), 128)
    assert image.pc == KEXIT + 1


def test_resume_saved_image(stdin, capsys, tmp_path):
    stdin(_boot_input(1, 1))
    saved = tmp_path / "first.img"
    cli.main(["--save", str(saved)])
    capsys.readouterr()

    stdin("20 22")
    assert cli.main([str(saved)]) == cli.EXIT_OK
    assert capsys.readouterr().out == "42\n"


def test_missing_image_exits_1(stdin, tmp_path):
    stdin("")
    assert cli.main(["-l", str(tmp_path / "missing.img")]) == cli.EXIT_LOAD_FAILURE


def test_bad_config_exits_1(stdin, tmp_path):
    stdin("")
    config = tmp_path / "bad.yaml"
    config.write_text("machine:\n  memory_size: 512\n")
    assert cli.main(["-c", str(config)]) == cli.EXIT_LOAD_FAILURE


# @intent:test_case_fault 不正なプログラムは終了コード2で終了し、イメージは保存されないことを検証します。
def test_malformed_program_exits_2(stdin, tmp_path):
    stdin("")
    memory = bytearray(128)
    memory[0:3] = bytes([Opcode.MOV, num_(1), num_(2)])
    program = tmp_path / "bad.img"
    ImageWriter().save_image(str(program), MachineImage(pc=0, memory=bytes(memory)))
    saved = tmp_path / "never.img"

    assert cli.main([str(program), "-s", str(saved)]) == cli.EXIT_FAULT
    assert not saved.exists()


def test_save_failure_keeps_exit_ok(stdin, tmp_path):
    stdin(_boot_input(1, 2))
    existing = tmp_path / "exists.img"
    existing.write_bytes(b"keep")
    assert cli.main(["-s", str(existing)]) == cli.EXIT_OK
    assert existing.read_bytes() == b"keep"


def test_debug_dumps_every_step(stdin, capsys):
    stdin(_boot_input(2, 2))
    assert cli.main(["-d", "--no-pause"]) == cli.EXIT_OK
    out = capsys.readouterr().out
    assert out.count("MEM") > 10
    assert "4\n" in out


def _write_program(path, *program):
    memory = bytearray(128)
    memory[:len(program)] = bytes(int(b) for b in program)
    ImageWriter().save_image(str(path), MachineImage(pc=0, memory=bytes(memory)))
    return str(path)


# @intent:test_case_raw_bytes 文字チャネルのUTF-8として不正な入力がCLIを異常終了させず、そのままエコーされることを検証します。
def test_character_echo_is_byte_exact(stdin, capsysbinary, tmp_path):
    chr_ = int(IoChannel.CHARACTER)
    program = _write_program(
        tmp_path / "echo.img",
        Opcode.IN, chr_, addr_(0), Opcode.OUT, chr_, addr_(0),
        Opcode.IN, chr_, addr_(0), Opcode.OUT, chr_, addr_(0),
        Opcode.SUS,
    )
    stdin(b"\xff\xe9")

    assert cli.main([program]) == cli.EXIT_OK
    assert capsysbinary.readouterr().out == b"\xff\xe9"


@pytest.mark.parametrize("argv, expected", [
    (["first.img", "-l", "second.img"], "second.img"),
    (["-l", "first.img", "second.img"], "second.img"),
    (["-l", "only.img"], "only.img"),
    (["only.img"], "only.img"),
    ([], None),
])
def test_last_image_argument_wins(argv, expected):
    args = cli.build_parser().parse_args(argv)
    config = cli.apply_arguments(SystemConfig(), args)
    assert config.image.load == expected
