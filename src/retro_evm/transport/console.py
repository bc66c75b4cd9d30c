# retro_evm/transport/console.py
"""
コンソールI/Oデバイス

標準入出力のバイナリバッファ（または差し替え可能なバイトストリーム）を、バスのI/Oチャネルに接続する
文字デバイスと数値デバイスを提供します。入力は同期的にブロックします。
文字チャネルはテキストとしてデコードせず、1バイトを1文字コードとして扱います。
"""
import logging
import sys
from typing import BinaryIO, List, Optional

from retro_evm.transport.bus import IoDevice

logger = logging.getLogger(__name__)

EOF_VALUE = -1

_NEWLINE = ord("\n")
_SIGNS = (ord("+"), ord("-"))


def _is_space(byte: int) -> bool:
    return byte in b" \t\n\r\v\f"


def _is_digit(byte: int) -> bool:
    return ord("0") <= byte <= ord("9")


# @intent:responsibility 入出力ストリームと先読みバッファを共有する端末を表します。
# @intent:rationale 文字チャネルと数値チャネル、トレーサの一時停止が同じ入力ストリームを読むため、
#                  数値パース時に読み過ぎた1バイトを押し戻して後続の読み出しに引き渡します。
class ConsoleTerminal:
    def __init__(self, stdin: Optional[BinaryIO] = None, stdout: Optional[BinaryIO] = None,
                 interactive: Optional[bool] = None):
        self._stdin = stdin if stdin is not None else sys.stdin.buffer
        self._stdout = stdout if stdout is not None else sys.stdout.buffer
        self._pushback: List[int] = []
        if interactive is None:
            isatty = getattr(self._stdin, "isatty", None)
            interactive = bool(isatty and isatty())
        self.interactive = interactive

    def getc(self) -> int:
        """1バイト読み出します。入力終端ではEOF_VALUEを返します。"""
        if self._pushback:
            return self._pushback.pop()
        data = self._stdin.read(1)
        return data[0] if data else EOF_VALUE

    def ungetc(self, byte: int) -> None:
        if byte != EOF_VALUE:
            self._pushback.append(byte)

    def put(self, data: bytes) -> None:
        # 同じ端末に書き込むテキスト層（トレーサ等）の出力と順序を揃える
        sys.stdout.flush()
        self._stdout.write(data)
        self._stdout.flush()

    # @intent:responsibility 改行（または入力終端）まで読み捨てます。押し戻されたバイトも消費します。
    def read_line(self) -> bytes:
        line = bytearray()
        byte = self.getc()
        while byte != EOF_VALUE:
            line.append(byte)
            if byte == _NEWLINE:
                break
            byte = self.getc()
        return bytes(line)

    # @intent:responsibility scanf("%d")と同様に、空白を読み飛ばして符号付き10進整数を1つ読み出します。
    # @intent:post-condition 数値として解釈できない場合はNoneを返し、問題のバイトは入力に残ります。
    def read_int(self) -> Optional[int]:
        byte = self.getc()
        while byte != EOF_VALUE and _is_space(byte):
            byte = self.getc()

        sign = EOF_VALUE
        if byte in _SIGNS:
            sign, byte = byte, self.getc()

        digits = bytearray()
        while byte != EOF_VALUE and _is_digit(byte):
            digits.append(byte)
            byte = self.getc()
        self.ungetc(byte)

        if not digits:
            self.ungetc(sign)
            return None
        value = int(digits.decode("ascii"))
        return -value if sign == ord("-") else value


# @intent:responsibility CHARACTERチャネル。1バイトの文字コードを枠付けなしで入出力します。
class CharacterPort(IoDevice):
    def __init__(self, terminal: ConsoleTerminal):
        self._terminal = terminal

    def read(self) -> int:
        return self._terminal.getc()

    def write(self, data: int) -> None:
        self._terminal.put(bytes([data & 0xFF]))


# @intent:responsibility NUMERICチャネル。10進整数を入出力します。
class NumericPort(IoDevice):
    PROMPT = b"?"

    def __init__(self, terminal: ConsoleTerminal):
        self._terminal = terminal

    def read(self) -> int:
        if self._terminal.interactive:
            self._terminal.put(self.PROMPT)
        value = self._terminal.read_int()
        if value is None:
            logger.warning("numeric input is not a decimal integer, reading 0")
            return 0
        return value

    def write(self, data: int) -> None:
        self._terminal.put(f"{data}\n".encode("ascii"))
