# src/retro_evm/arch/evm/instructions/io.py
"""
入出力命令 (IN, OUT) の実装。
"""
from retro_evm.core.snapshot import Operation
from retro_evm.transport.bus import Bus
from retro_evm.arch.evm.state import EvmCpuState
from retro_evm.arch.evm.opcodes import Opcode
from .base import RAW, ADDR, decode_operands, expect_reference, read_address, write_operand

# --- IN ---
def decode_in(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.IN, bus, pc, (RAW, ADDR))

# @intent:responsibility IN命令を実行し、チャネルから読んだ値を1バイトにマスクして格納します。
def execute_in(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    channel, dst = op.decoded
    expect_reference(dst)
    write_operand(state, bus, dst, bus.read_io(channel))

# --- OUT ---
def decode_out(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.OUT, bus, pc, (RAW, ADDR))

def execute_out(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    channel, src = op.decoded
    bus.write_io(channel, read_address(state, bus, src))
