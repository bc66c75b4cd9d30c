# src/retro_evm/arch/evm/operand.py
"""
オペランドのエンコード/デコード。

オペランドは1バイトで、最下位ビットがタグです。
1ならリテラル（値は byte >> 1）、0ならレジスタ/メモリへの参照（インデックスは byte // 2）を表します。
"""
from dataclasses import dataclass
from typing import Union

from retro_evm.arch.evm.state import NUM_REGISTERS

# @intent:constant 7ビットに収まるリテラル値/インデックスの上限。
MAX_OPERAND_VALUE = 0x7F


@dataclass(frozen=True)
class Literal:
    value: int

    def __str__(self) -> str:
        return f"#{self.value}"


@dataclass(frozen=True)
class Reference:
    index: int

    def __str__(self) -> str:
        if self.index < NUM_REGISTERS:
            return f"R{self.index}"
        return f"[{self.index}]"


Operand = Union[Literal, Reference]


# @intent:responsibility 生のオペランドバイトを、リテラルまたは参照の二択のタグ付き値に即時デコードします。
def decode_operand(byte: int) -> Operand:
    if byte & 1:
        return Literal(byte >> 1)
    return Reference(byte // 2)


# @intent:responsibility 数値をタグ付きリテラル形式 (n*2+1) にパックします。
def encode_literal(n: int) -> int:
    if not 0 <= n <= MAX_OPERAND_VALUE:
        raise ValueError(f"Literal {n} is not representable (0..{MAX_OPERAND_VALUE}).")
    return n * 2 + 1


# @intent:responsibility インデックスを参照形式 (n*2) にパックします。レジスタ R0..R7 もこの形式です。
def encode_reference(index: int) -> int:
    if not 0 <= index <= MAX_OPERAND_VALUE:
        raise ValueError(f"Reference index {index} is not representable (0..{MAX_OPERAND_VALUE}).")
    return index * 2
