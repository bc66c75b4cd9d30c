# src/retro_evm/arch/evm/state.py
"""
EVM CPU固有の状態定義。
"""
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List
from retro_evm.core.state import CpuState

# EVM フラグレジスタ (FR) ビットマスク
# @intent:constant フラグレジスタ内の各フラグビットの位置を定義します。その他のビットは予約済みです。
FL_ZERO = 0x1
FL_CARRY = 0x2

# @intent:constant 汎用レジスタ数。アドレス空間のインデックス 0..7 がレジスタに対応します。
NUM_REGISTERS = 8

# @intent:constant メモリプールの最大サイズ。オペランドの1ビットをタグに使うため、インデックスは7ビットに収まる必要があります。
MAX_MEMORY_SIZE = 128


# @intent:responsibility I/O命令が指定する論理チャネル番号を定義します。
class IoChannel(IntEnum):
    CHARACTER = 0
    NUMERIC = 1
    STRING = 2  # 予約済み。入出力は定義されていません。


# @intent:responsibility EVM CPUのPC、フラグレジスタ、8本の汎用レジスタを保持します。
@dataclass
class EvmCpuState(CpuState):
    """
    EVM CPUのレジスタ状態を保持するデータクラス。
    イメージの保存対象はPCのみで、FRとレジスタはロードのたびに0に戻ります。
    """
    fr: int = 0x00  # Flags Register
    registers: List[int] = field(default_factory=lambda: [0] * NUM_REGISTERS)

    @property
    def flag_zero(self) -> bool:
        return (self.fr & FL_ZERO) != 0

    @flag_zero.setter
    def flag_zero(self, value: bool) -> None:
        if value: self.fr |= FL_ZERO
        else: self.fr &= ~FL_ZERO

    @property
    def flag_carry(self) -> bool:
        return (self.fr & FL_CARRY) != 0

    @flag_carry.setter
    def flag_carry(self, value: bool) -> None:
        if value: self.fr |= FL_CARRY
        else: self.fr &= ~FL_CARRY
