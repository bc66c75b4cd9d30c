# src/retro_evm/arch/evm/cpu.py
"""
EVM CPUエミュレーションの中心モジュール。
"""
import logging
from typing import Dict, List, Optional, Tuple
from retro_evm.common.errors import AddressFault
from retro_evm.common.types import RegisterLayoutInfo, RegisterInfo
from retro_evm.core.cpu import AbstractCpu
from retro_evm.core.snapshot import MachineStatus, Operation
from retro_evm.arch.evm.state import EvmCpuState, NUM_REGISTERS
from retro_evm.arch.evm.opcodes import Opcode, HALT_MNEMONIC
from retro_evm.transport.bus import Bus
from retro_evm.arch.evm.instructions import decode_opcode, execute_instruction
from retro_evm.arch.evm import disassembler

logger = logging.getLogger(__name__)

# @intent:responsibility EVM CPUの具体的なエミュレーションロジック（フェッチ、デコード、実行、停止判定）を提供します。
class EvmCpu(AbstractCpu):
    """
    レジスタとメモリが単一のアドレス空間を共有する、11命令の小さなCPU。
    """
    def __init__(self, bus: Bus):
        super().__init__(bus)

    def _create_initial_state(self) -> EvmCpuState:
        return EvmCpuState()

    # @intent:responsibility PCの範囲を検証し、オペコードを1バイトフェッチしてPCを進めます。
    # @intent:pre-condition 0 <= pc < メモリサイズ。満たさない場合はAddressFaultになります。
    def _fetch(self) -> int:
        pc = self._state.pc
        if not 0 <= pc < self._bus.memory_size():
            raise AddressFault(f"pc {pc} is outside memory of size {self._bus.memory_size()}", pc)
        opcode = self._bus.read(pc)
        self._state.pc = pc + 1
        return opcode

    def _decode(self, opcode: int) -> Operation:
        return decode_opcode(opcode, self._bus, self._state.pc)

    def _execute(self, operation: Operation) -> None:
        execute_instruction(operation, self._state, self._bus)

    # @intent:responsibility SUS命令、または命令セット外のバイトでマシンをHALTEDに遷移させます。
    def _next_status(self, operation: Operation) -> MachineStatus:
        if operation.mnemonic == HALT_MNEMONIC:
            logger.debug("no handler for opcode $%s, halting", operation.opcode_hex)
            return MachineStatus.HALTED
        if operation.mnemonic == Opcode.SUS.name:
            return MachineStatus.HALTED
        return MachineStatus.RUNNING

    def get_register_map(self, state: Optional[EvmCpuState] = None) -> Dict[str, int]:
        s = state if state is not None else self._state
        regs = {"PC": s.pc, "FR": s.fr}
        for i, value in enumerate(s.registers):
            regs[f"R{i}"] = value
        return regs

    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        return [
            RegisterLayoutInfo("Control", [RegisterInfo("PC", 8), RegisterInfo("FR", 8)]),
            RegisterLayoutInfo("General", [RegisterInfo(f"R{i}", 8) for i in range(NUM_REGISTERS)]),
        ]

    def get_flag_state(self, state: Optional[EvmCpuState] = None) -> Dict[str, bool]:
        s = state if state is not None else self._state
        return {"Z": s.flag_zero, "C": s.flag_carry}

    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        return disassembler.disassemble(self._bus, start_addr, length)
