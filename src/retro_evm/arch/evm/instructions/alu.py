# src/retro_evm/arch/evm/instructions/alu.py
"""
算術演算命令 (ADD, SUB) の実装。
"""
from retro_evm.core.snapshot import Operation
from retro_evm.transport.bus import Bus
from retro_evm.arch.evm.state import EvmCpuState
from retro_evm.arch.evm.opcodes import Opcode
from .base import EXPR, ADDR, decode_operands, read_address, read_operand, write_operand

# @intent:utility_function 8ビット加算を行い、ZERO/CARRYフラグを上書きします。
# @intent:post-condition FRの全ビットが上書きされます（既存ビットとのマージは行いません）。
def add8(state: EvmCpuState, old: int, delta: int) -> int:
    new = (old + delta) & 0xFF
    state.fr = 0
    state.flag_carry = new < old
    state.flag_zero = new == 0
    return new

# @intent:utility_function 8ビット減算を行い、ZERO/CARRYフラグを上書きします。CARRYは借りの発生を表します。
def sub8(state: EvmCpuState, old: int, delta: int) -> int:
    new = (old - delta) & 0xFF
    state.fr = 0
    state.flag_carry = new > old
    state.flag_zero = new == 0
    return new

# --- ADD ---
def decode_add(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.ADD, bus, pc, (EXPR, ADDR))

# @intent:responsibility ADD命令を実行し、dst = dst + src を書き戻してフラグを更新します。
def execute_add(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    src, dst = op.decoded
    old = read_address(state, bus, dst)
    write_operand(state, bus, dst, add8(state, old, read_operand(state, bus, src)))

# --- SUB ---
def decode_sub(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.SUB, bus, pc, (EXPR, ADDR))

# @intent:responsibility SUB命令を実行し、dst = dst - src を書き戻してフラグを更新します。
def execute_sub(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    src, dst = op.decoded
    old = read_address(state, bus, dst)
    write_operand(state, bus, dst, sub8(state, old, read_operand(state, bus, src)))
