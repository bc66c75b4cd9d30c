# tests/transport/test_console.py
"""
retro_evm.transport.consoleモジュールの単体テスト。
"""
import io
import logging

from retro_evm.transport.console import ConsoleTerminal, CharacterPort, NumericPort, EOF_VALUE

# @intent:test_suite コンソールI/Oチャネル（文字、数値）の入出力フォーマットを検証します。

def make_terminal(data: bytes = b"", interactive: bool = False):
    stdout = io.BytesIO()
    return ConsoleTerminal(stdin=io.BytesIO(data), stdout=stdout, interactive=interactive), stdout

class TestCharacterPort:
    def test_read_characters(self):
        terminal, _ = make_terminal(b"hi")
        port = CharacterPort(terminal)
        assert port.read() == ord("h")
        assert port.read() == ord("i")

    def test_read_eof(self):
        terminal, _ = make_terminal(b"")
        assert CharacterPort(terminal).read() == EOF_VALUE

    # @intent:test_case_raw_bytes UTF-8として不正なバイトもそのまま1文字コードとして読み出されることを検証します。
    def test_read_non_utf8_byte(self):
        terminal, _ = make_terminal(b"\xff")
        assert CharacterPort(terminal).read() == 0xFF

    def test_read_multibyte_sequence_byte_by_byte(self):
        terminal, _ = make_terminal("€".encode("utf-8"))
        port = CharacterPort(terminal)
        assert [port.read() for _ in range(4)] == [0xE2, 0x82, 0xAC, EOF_VALUE]

    def test_write_has_no_framing(self):
        terminal, stdout = make_terminal()
        port = CharacterPort(terminal)
        port.write(ord("O"))
        port.write(ord("K"))
        assert stdout.getvalue() == b"OK"

    def test_write_high_byte_is_single_byte(self):
        terminal, stdout = make_terminal()
        port = CharacterPort(terminal)
        port.write(0xE9)
        port.write(0x1FF)
        assert stdout.getvalue() == b"\xe9\xff"

class TestNumericPort:
    def test_read_numbers_like_scanf(self):
        terminal, _ = make_terminal(b"  12\n-3 +7")
        port = NumericPort(terminal)
        assert port.read() == 12
        assert port.read() == -3
        assert port.read() == 7

    def test_read_leaves_trailing_text_for_character_channel(self):
        terminal, _ = make_terminal(b"42x")
        assert NumericPort(terminal).read() == 42
        assert CharacterPort(terminal).read() == ord("x")

    def test_read_invalid_number_returns_zero(self, caplog):
        terminal, _ = make_terminal(b"abc")
        with caplog.at_level(logging.WARNING):
            assert NumericPort(terminal).read() == 0
        assert "not a decimal integer" in caplog.text
        # 問題の文字は入力に残る
        assert CharacterPort(terminal).read() == ord("a")

    def test_lone_sign_is_left_in_input(self):
        terminal, _ = make_terminal(b"-x")
        assert NumericPort(terminal).read() == 0
        port = CharacterPort(terminal)
        assert port.read() == ord("-")
        assert port.read() == ord("x")

    def test_non_ascii_input_is_not_a_number(self):
        terminal, _ = make_terminal(b"\xff7")
        assert NumericPort(terminal).read() == 0
        assert CharacterPort(terminal).read() == 0xFF

    def test_read_eof_returns_zero(self):
        terminal, _ = make_terminal(b"")
        assert NumericPort(terminal).read() == 0

    def test_prompt_only_when_interactive(self):
        terminal, stdout = make_terminal(b"5", interactive=True)
        assert NumericPort(terminal).read() == 5
        assert stdout.getvalue() == b"?"

        terminal, stdout = make_terminal(b"5", interactive=False)
        NumericPort(terminal).read()
        assert stdout.getvalue() == b""

    def test_write_appends_newline(self):
        terminal, stdout = make_terminal()
        NumericPort(terminal).write(255)
        assert stdout.getvalue() == b"255\n"

    def test_interactive_detection_uses_isatty(self):
        terminal = ConsoleTerminal(stdin=io.BytesIO(b""), stdout=io.BytesIO())
        assert terminal.interactive is False

class TestReadLine:
    def test_read_line_consumes_pushback_first(self):
        terminal, _ = make_terminal(b"7x\nnext")
        assert terminal.read_int() == 7
        assert terminal.read_line() == b"x\n"
        assert terminal.getc() == ord("n")

    def test_read_line_at_eof(self):
        terminal, _ = make_terminal(b"tail")
        assert terminal.read_line() == b"tail"
        assert terminal.read_line() == b""
