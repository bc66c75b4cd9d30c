# src/retro_evm/arch/evm/bootstrap.py
"""
組み込みブートストラップイメージ。

イメージファイルが指定されなかった場合に使用される初期メモリ内容を生成します。
ブートストラップは数値チャネルから KSTART, KLEN と KLEN 個の命令バイトを読み込んで
KSTART 以降のメモリへ配置し、ウォームブート地点を記録してから、2つのオペランド a, b を
読み込んでカーネル (KSTART) へジャンプします。カーネルは KEXIT (SUS) へ戻ることで
実行を中断でき、保存したイメージを再開するとウォームブートから処理が続きます。

レジスタの用途:
    R1  KSTART          R2  KLEN / a        R3  &VARS / KEXIT
    R4  ロードループ先頭  R5  命令バイト       R6  b
    R7  書き込みポインタ / &GREET+1
"""
from typing import List

from retro_evm.arch.evm.opcodes import Opcode
from retro_evm.arch.evm.operand import encode_literal as num_, encode_reference as addr_
from retro_evm.arch.evm.state import FL_ZERO, IoChannel, MAX_MEMORY_SIZE
from retro_evm.loader.image import MachineImage

R1, R2, R3, R4, R5, R6, R7 = (addr_(i) for i in range(1, 8))
N1 = num_(1)
IO_NUM = int(IoChannel.NUMERIC)

# @intent:constant 末尾に確保する変数領域のバイト数と、ウォームブートアドレス保存領域のバイト数。
NVARS = 4
GREET_SIZE = 3

# @intent:constant ブートストラップ内の SUS 命令の位置。カーネルはここへ戻ります。
KEXIT = 48


def vars_address(memory_size: int) -> int:
    return memory_size - NVARS


def greet_address(memory_size: int) -> int:
    return vars_address(memory_size) - GREET_SIZE - 1


# @intent:responsibility ブートストラッププログラムのバイト列を生成します。
def bootstrap_program(memory_size: int = MAX_MEMORY_SIZE) -> List[int]:
    VARS = vars_address(memory_size)
    GREET = greet_address(memory_size)

    program = [
        # BOOT: カーネルの読み込み
        Opcode.IN, IO_NUM, R1,          # R1 = KSTART
        Opcode.IN, IO_NUM, R2,          # R2 = KLEN
        Opcode.MOV, num_(VARS), R3,     # R3 = &MEM[VARS]
        Opcode.ATP, R1, R3,             # MEM[VARS] = KSTART (ロード中にR1は上書きされる)
        Opcode.MOV, R1, R7,             # R7 = 書き込みポインタ
        Opcode.MPC, R4,                 # R4 = ループ先頭
        Opcode.IN, IO_NUM, R5,          # R5 = 命令バイト
        Opcode.ATP, R5, R7,             # *R7 = R5
        Opcode.ADD, N1, R7,             # R7++
        Opcode.SUB, N1, R2,             # R2--
        Opcode.JIF, FL_ZERO, R4,        # !ZF ならループ先頭へ
        Opcode.MPC, addr_(GREET),       # MEM[GREET] = ウォームブート地点

        # WARMBOOT: オペランドの読み込みとカーネル呼び出し
        Opcode.MOV, num_(GREET + 1), R7,
        Opcode.IN, IO_NUM, R2,          # a
        Opcode.IN, IO_NUM, R6,          # b
        Opcode.MOV, num_(KEXIT), R3,    # R3 = KEXIT
        Opcode.JMR, addr_(VARS),        # KSTART へ

        # KEXIT
        Opcode.SUS,
        Opcode.JMR, addr_(GREET),       # 再開時はウォームブートへ
    ]
    return [int(b) for b in program]


# @intent:responsibility 組み込みのブートストラップイメージを生成します。
# @intent:pre-condition プログラム本体が変数領域・GREET領域と重ならないメモリサイズである必要があります。
def build_bootstrap_image(memory_size: int = MAX_MEMORY_SIZE, pc: int = 0) -> MachineImage:
    if not 0 < memory_size <= MAX_MEMORY_SIZE:
        raise ValueError(f"memory size {memory_size} must be in 1..{MAX_MEMORY_SIZE}")
    if not 0 <= pc < memory_size:
        raise ValueError(f"pc {pc} is outside memory of size {memory_size}")
    GREET = greet_address(memory_size)
    program = bootstrap_program(memory_size) if GREET > 0 else []
    if not program or len(program) > GREET:
        raise ValueError(f"memory size {memory_size} is too small for the bootstrap program")
    memory = bytearray(memory_size)
    memory[:len(program)] = bytes(program)
    return MachineImage(pc=pc, memory=bytes(memory))
