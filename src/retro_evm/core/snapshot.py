# retro_evm/core/snapshot.py
"""
実行状態の不変スナップショット

このモジュールは、1ステップ実行後のCPUとバスの状態を記録した不変のデータ構造を定義します。
トレーサへの情報提供と、テスト時の状態検証に用いる責務を負います。
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple

from retro_evm.core.state import CpuState
from retro_evm.common.errors import EvmFault
from retro_evm.transport.bus import BusAccess


# @intent:responsibility 実行ループの状態を定義します。
class MachineStatus(Enum):
    RUNNING = "RUNNING"
    HALTED = "HALTED"
    FAULTED = "FAULTED"


# @intent:responsibility デコードされた命令の詳細を記録します。
@dataclass(frozen=True)
class Operation:
    """
    デコードされた命令の詳細（HEX、ニーモニック、オペランド）を記録するデータクラス。
    """
    opcode_hex: str  # 例: "02"
    mnemonic: str  # 例: "ADD"
    operands: List[str] = field(default_factory=list)  # 表示用。例: ["#5", "R0"]
    operand_bytes: List[int] = field(default_factory=list)  # 生のオペランドバイト
    decoded: Tuple[Any, ...] = ()  # デコード済みオペランド (Literal / Reference / 生の整数)
    length: int = 1  # 命令のバイト長 (オペコードを含む)


# @intent:responsibility 実行に関するメタデータを記録します。
@dataclass(frozen=True)
class Metadata:
    step_count: int
    status: MachineStatus = MachineStatus.RUNNING


# @intent:responsibility ある一時点におけるCPUとバスの状態を不変に記録します。
@dataclass(frozen=True)
class Snapshot:
    """
    1ステップ実行後のCPU状態、メモリ内容、バスアクティビティを記録した不変のデータ構造。
    フォールトが発生した場合は fault に構造化された例外が格納されます。
    """
    state: CpuState
    operation: Operation
    metadata: Metadata
    bus_activity: List[BusAccess] = field(default_factory=list)
    memory: bytes = b""
    fault: Optional[EvmFault] = None

    # @intent:rationale stateは生成時にコピーされたものを受け取るため、後続ステップの変更の影響を受けません。

    @property
    def halted(self) -> bool:
        return self.metadata.status != MachineStatus.RUNNING
