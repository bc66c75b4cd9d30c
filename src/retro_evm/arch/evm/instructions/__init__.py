# src/retro_evm/arch/evm/instructions/__init__.py
"""
EVM命令セット実装パッケージ。
"""
from retro_evm.transport.bus import Bus
from retro_evm.core.snapshot import Operation
from retro_evm.arch.evm.state import EvmCpuState
from retro_evm.arch.evm.opcodes import Opcode, HALT_MNEMONIC
from .maps import DECODE_MAP, EXECUTE_MAP

# @intent:responsibility EVMのオペコードをデコードします。
# @intent:rationale 命令セットに含まれないバイトはエラーではなく、明示的なHALT操作としてデコードします。
def decode_opcode(opcode: int, bus: Bus, pc: int) -> Operation:
    """
    EVMのオペコードをデコードし、Operationオブジェクトを返します。
    pcはオペコードの直後（最初のオペランド）を指します。
    """
    try:
        decoder = DECODE_MAP[Opcode(opcode)]
    except ValueError:
        return Operation(opcode_hex=f"{opcode:02X}", mnemonic=HALT_MNEMONIC, length=1)
    return decoder(opcode, bus, pc)

# @intent:responsibility デコードされたEVM命令を実行します。
def execute_instruction(operation: Operation, state: EvmCpuState, bus: Bus) -> None:
    """
    デコードされたEVM命令を実行し、CPUの状態を変更します。HALT操作は何もしません。
    """
    if operation.mnemonic == HALT_MNEMONIC:
        return
    executor = EXECUTE_MAP[Opcode(int(operation.opcode_hex, 16))]
    executor(state, bus, operation)
