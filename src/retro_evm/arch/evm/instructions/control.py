# src/retro_evm/arch/evm/instructions/control.py
"""
制御命令 (SUS, JIF, JMR) の実装。
"""
from retro_evm.core.snapshot import Operation
from retro_evm.transport.bus import Bus
from retro_evm.arch.evm.state import EvmCpuState
from retro_evm.arch.evm.opcodes import Opcode
from .base import RAW, ADDR, decode_operands, expect_reference, read_address

# --- SUS ---
def decode_sus(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.SUS, bus, pc, ())

# @intent:responsibility SUS命令を実行します（何もしません）。実行ループの停止はCPU側が判定します。
def execute_sus(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    pass

# --- JIF ---
def decode_jif(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.JIF, bus, pc, (RAW, ADDR))

# @intent:responsibility JIF命令を実行し、マスクで指定したフラグがクリアされている場合に分岐します。
# @intent:rationale フラグマスクはタグなしの生バイト (FL_ZERO=1, FL_CARRY=2) として解釈します。
def execute_jif(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    mask, target = op.decoded
    expect_reference(target)
    if not state.fr & mask:
        state.pc = read_address(state, bus, target)

# --- JMR ---
def decode_jmr(opcode: int, bus: Bus, pc: int) -> Operation:
    return decode_operands(Opcode.JMR, bus, pc, (ADDR,))

def execute_jmr(state: EvmCpuState, bus: Bus, op: Operation) -> None:
    (target,) = op.decoded
    state.pc = read_address(state, bus, target)
