# src/retro_evm/arch/evm/instructions/base.py
"""
EVM命令実装用の共通ユーティリティ。

オペランドのデコード、およびレジスタ/メモリの統合アドレス空間に対する読み書きを提供します。
"""
from typing import Sequence

from retro_evm.common.errors import AddressFault, EncodingFault
from retro_evm.core.snapshot import Operation
from retro_evm.transport.bus import Bus
from retro_evm.arch.evm.state import EvmCpuState, NUM_REGISTERS
from retro_evm.arch.evm.operand import (
    MAX_OPERAND_VALUE, Literal, Operand, Reference, decode_operand,
)
from retro_evm.arch.evm.opcodes import Opcode

# @intent:constant オペランドの種別。EXPRはリテラル/参照の両方、ADDRは参照のみ、RAWはタグなしの生バイト。
EXPR = "expr"
ADDR = "addr"
RAW = "raw"


# @intent:utility_function オペコード直後のオペランドを読み、種別に応じてデコードしたOperationを返します。
# @intent:pre-condition pcはオペコードの直後（最初のオペランド）を指している必要があります。
def decode_operands(opcode: Opcode, bus: Bus, pc: int, kinds: Sequence[str]) -> Operation:
    raw_bytes = []
    decoded = []
    texts = []
    for offset, kind in enumerate(kinds):
        _check_index(bus, pc + offset)
        byte = bus.read(pc + offset)
        raw_bytes.append(byte)
        if kind == RAW:
            decoded.append(byte)
            texts.append(f"${byte:02X}")
        else:
            operand = decode_operand(byte)
            decoded.append(operand)
            texts.append(str(operand))
    return Operation(
        opcode_hex=f"{int(opcode):02X}",
        mnemonic=opcode.name,
        operands=texts,
        operand_bytes=raw_bytes,
        decoded=tuple(decoded),
        length=1 + len(kinds),
    )


# @intent:utility_function 参照オペランドであることを検証します。リテラルは不正なエンコーディングです。
def expect_reference(operand: Operand) -> Reference:
    if not isinstance(operand, Reference):
        raise EncodingFault(f"operand {operand} must be an address, not a literal")
    return operand


def _check_index(bus: Bus, index: int) -> None:
    if not 0 <= index < bus.memory_size():
        raise AddressFault(f"address index {index} is outside memory of size {bus.memory_size()}")


# @intent:utility_function オペランドの値を解決します。
# @intent:rationale インデックス 0..7 のみがレジスタに対応し、8以上は通常メモリを指します。
def read_operand(state: EvmCpuState, bus: Bus, operand: Operand) -> int:
    if isinstance(operand, Literal):
        return operand.value
    index = operand.index
    if index < NUM_REGISTERS:
        return state.registers[index]
    _check_index(bus, index)
    return bus.read(index)


# @intent:utility_function 参照オペランドの指す値を読み出します（ジャンプ先や間接参照のベース用）。
def read_address(state: EvmCpuState, bus: Bus, operand: Operand) -> int:
    return read_operand(state, bus, expect_reference(operand))


# @intent:utility_function 参照先のレジスタまたはメモリに値を書き込みます。値は1バイトにマスクされます。
def write_operand(state: EvmCpuState, bus: Bus, operand: Operand, value: int) -> None:
    index = expect_reference(operand).index
    value &= 0xFF
    if index < NUM_REGISTERS:
        state.registers[index] = value
        return
    _check_index(bus, index)
    bus.write(index, value)


# @intent:utility_function 間接参照オペランドの値を、参照として再エンコード可能なインデックスに変換します。
def resolve_indirect(state: EvmCpuState, bus: Bus, operand: Operand) -> Reference:
    index = read_address(state, bus, operand)
    if index > MAX_OPERAND_VALUE:
        raise AddressFault(f"indirect index {index} cannot be encoded as an address")
    return Reference(index)
