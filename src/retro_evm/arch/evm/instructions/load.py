# src/retro_evm/arch/evm/instructions/load.py
"""
転送命令 (MOV, MPC, AT, ATP) の実装。
"""
from retro_evm.core.snapshot import Operation
from retro_evm.transport.bus import Bus
from retro_evm.arch.evm.state import EvmCpuState
from retro_evm.arch.evm.opcodes import Opcode
from .base import (
    EXPR, ADDR, decode_operands, expect_reference, read_operand, resolve_indirect, write_operand,
)

# --- MOV ---
def decode_mov(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.MOV, bus, pc, (EXPR, ADDR))

def execute_mov(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    src, dst = op.decoded
    write_operand(state, bus, dst, read_operand(state, bus, src))

# --- MPC ---
def decode_mpc(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.MPC, bus, pc, (ADDR,))

# @intent:responsibility MPC命令を実行し、オペランド消費後の（次の命令を指す）PCを保存します。
def execute_mpc(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    (dst,) = op.decoded
    write_operand(state, bus, dst, state.pc)

# --- AT ---
def decode_at(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.AT, bus, pc, (ADDR, ADDR))

# @intent:responsibility AT命令（間接ロード）を実行します。dst = *ix
# @intent:rationale ixの値をアドレスとして再エンコードし、通常の読み出し経路で解決します。
def execute_at(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    ix, dst = op.decoded
    expect_reference(dst)
    target = resolve_indirect(state, bus, ix)
    write_operand(state, bus, dst, read_operand(state, bus, target))

# --- ATP ---
def decode_atp(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.ATP, bus, pc, (EXPR, ADDR))

# @intent:responsibility ATP命令（間接ストア）を実行します。*ix = src
def execute_atp(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    src, ix = op.decoded
    target = resolve_indirect(state, bus, ix)
    write_operand(state, bus, target, read_operand(state, bus, src))
