"""
オペコードと命令実装のマッピング定義。
"""
from retro_evm.arch.evm.opcodes import Opcode
from . import load
from . import alu
from . import control
from . import io

# @intent:map オペコードからデコード関数へのマッピングテーブル。
DECODE_MAP = {
    # Control
    Opcode.SUS: control.decode_sus,
    Opcode.JIF: control.decode_jif,
    Opcode.JMR: control.decode_jmr,

    # Load/Store
    Opcode.MOV: load.decode_mov,
    Opcode.MPC: load.decode_mpc,
    Opcode.AT: load.decode_at,
    Opcode.ATP: load.decode_atp,

    # ALU
    Opcode.ADD: alu.decode_add,
    Opcode.SUB: alu.decode_sub,

    # I/O
    Opcode.IN: io.decode_in,
    Opcode.OUT: io.decode_out,
}

# @intent:map オペコードから実行関数へのマッピングテーブル。
EXECUTE_MAP = {
    # Control
    Opcode.SUS: control.execute_sus,
    Opcode.JIF: control.execute_jif,
    Opcode.JMR: control.execute_jmr,

    # Load/Store
    Opcode.MOV: load.execute_mov,
    Opcode.MPC: load.execute_mpc,
    Opcode.AT: load.execute_at,
    Opcode.ATP: load.execute_atp,

    # ALU
    Opcode.ADD: alu.execute_add,
    Opcode.SUB: alu.execute_sub,

    # I/O
    Opcode.IN: io.execute_in,
    Opcode.OUT: io.execute_out,
}
