# src/retro_evm/arch/evm/opcodes.py
"""
EVMの命令セット定義。
"""
from enum import IntEnum


# @intent:responsibility 11命令からなる閉じた命令セットを定義します。
# @intent:rationale ここに含まれないバイトは全て HALT 操作としてデコードされ、実行ループを停止させます。
class Opcode(IntEnum):
    SUS = 0   # サスペンド（実行ループ終了）
    MOV = 1   # MOV expr, addr
    ADD = 2   # ADD expr, addr
    SUB = 3   # SUB expr, addr
    JIF = 4   # JIF flag, addr  - フラグが偽ならジャンプ
    JMR = 5   # JMR addr        - レジスタ/メモリの値へジャンプ
    MPC = 6   # MPC addr        - 現在のPCを保存
    IN = 7    # IN ch, addr
    OUT = 8   # OUT ch, addr
    AT = 9    # AT @ix, addr    - 間接ロード
    ATP = 10  # ATP expr, @ix   - 間接ストア


HALT_MNEMONIC = "HALT"
