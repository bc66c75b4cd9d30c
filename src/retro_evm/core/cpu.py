# retro_evm/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と命令サイクル（実行ループ）の駆動に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, List, Dict, Tuple

from retro_evm.transport.bus import Bus
from retro_evm.core.snapshot import Snapshot, Operation, Metadata, MachineStatus
from retro_evm.core.state import CpuState
from retro_evm.common.errors import EvmFault
from retro_evm.common.types import RegisterLayoutInfo, StepObserver

logger = logging.getLogger(__name__)

# @intent:data_structure フェッチ自体が失敗した場合など、命令が確定しなかったステップを表すOperation。
NO_OPERATION = Operation(opcode_hex="--", mnemonic="----")


# @intent:responsibility 実行ループ(run)の結果を記録します。
@dataclass(frozen=True)
class RunResult:
    status: MachineStatus
    steps: int
    last_snapshot: Optional[Snapshot] = None
    fault: Optional[EvmFault] = None


# @intent:responsibility 抽象CPUの基本機能とインターフェースを定義します。
class AbstractCpu(ABC):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    Busとのインターフェース、基本的な状態管理、命令サイクルと実行ループを提供します。
    """
    # @intent:pre-condition `bus`は有効なBusオブジェクトである必要があります。
    def __init__(self, bus: Bus):
        self._bus = bus
        self._state: CpuState = self._create_initial_state()
        self._status = MachineStatus.RUNNING
        self._step_count: int = 0
        self._observers: List[StepObserver] = []
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        具体的なCPUアーキテクチャはこのメソッドを実装し、
        そのアーキテクチャに特化したCpuStateのサブクラスを返します。
        """
        pass

    # @intent:responsibility CPUをリセットし、初期状態(RUNNING)に戻します。メモリは変更しません。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._status = MachineStatus.RUNNING
        self._step_count = 0

    def get_state(self) -> CpuState:
        return self._state

    @property
    def status(self) -> MachineStatus:
        return self._status

    @property
    def bus(self) -> Bus:
        return self._bus

    # @intent:responsibility 各ステップ後に呼び出されるオブザーバを登録します。
    # @intent:rationale トレース表示などの観測はオブザーバとして差し込み、実行の正しさには関与させません。
    def add_observer(self, observer: StepObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: StepObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @abstractmethod
    def _fetch(self) -> int:
        """
        現在のPCからメモリの次の命令（オペコード）をフェッチし、その値を返します。
        フェッチ後、PCはオペコードの直後を指すように更新されるべきです。
        """
        pass

    @abstractmethod
    def _decode(self, opcode: int) -> Operation:
        """
        与えられたオペコードとその後続バイトを解析し、Operationオブジェクトとして返します。
        """
        pass

    @abstractmethod
    def _execute(self, operation: Operation) -> None:
        """
        デコードされた命令を実行し、レジスタやフラグ、メモリを更新します。
        不正なプログラムを検出した場合はEvmFaultを送出します。
        """
        pass

    # @intent:responsibility 命令実行後のマシン状態を決定します。
    def _next_status(self, operation: Operation) -> MachineStatus:
        return MachineStatus.RUNNING

    # @intent:responsibility 命令実行前にPCをオペランド分進めます（オペコードはフェッチ時に消費済み）。
    def _update_pc(self, operation: Operation) -> None:
        self._state.pc += operation.length - 1

    # @intent:responsibility CPUを1命令サイクル進め、その結果のスナップショットを返します。
    # @intent:rationale Template Methodパターンを採用し、共通の実行フロー
    #                  （ログクリア→フェッチ→デコード→PC更新→実行→状態遷移→Snapshot生成）を定義します。
    def step(self) -> Snapshot:
        """
        CPUを1命令サイクル進め、その時点でのCPUとバスの状態を含むSnapshotオブジェクトを返します。
        HALTED/FAULTED状態では何も実行せず、現在の状態のSnapshotを返します。
        """
        self._bus.get_and_clear_activity_log()
        if self._status != MachineStatus.RUNNING:
            return self.capture_snapshot()

        initial_pc = self._state.pc
        operation = NO_OPERATION
        fault: Optional[EvmFault] = None
        try:
            opcode = self._fetch()
            operation = self._decode(opcode)
            self._update_pc(operation)
            self._execute(operation)
            self._status = self._next_status(operation)
        except EvmFault as e:
            if e.pc < 0:
                e.pc = initial_pc
            fault = e
            self._status = MachineStatus.FAULTED
            logger.debug("fault at pc %d: %s", initial_pc, e)

        self._step_count += 1
        return self._create_snapshot(operation, fault)

    def _create_snapshot(self, operation: Operation, fault: Optional[EvmFault] = None) -> Snapshot:
        bus_activity = self._bus.get_and_clear_activity_log()
        return Snapshot(
            state=copy.deepcopy(self._state),
            operation=operation,
            metadata=Metadata(step_count=self._step_count, status=self._status),
            bus_activity=bus_activity,
            memory=self._bus.dump(),
            fault=fault,
        )

    # @intent:responsibility 命令を実行せずに現在の状態のスナップショットを生成します。
    def capture_snapshot(self) -> Snapshot:
        return self._create_snapshot(NO_OPERATION)

    # @intent:responsibility HALTEDまたはFAULTEDになるまで（または最大ステップ数まで）命令を実行し続けます。
    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """
        実行ループ。各ステップ後に登録済みオブザーバへSnapshotを通知します。
        """
        steps = 0
        last: Optional[Snapshot] = None
        while self._status == MachineStatus.RUNNING:
            if max_steps is not None and steps >= max_steps:
                break
            last = self.step()
            steps += 1
            for observer in list(self._observers):
                observer(last)
        return RunResult(
            status=self._status,
            steps=steps,
            last_snapshot=last,
            fault=last.fault if last is not None else None,
        )

    @abstractmethod
    def get_register_map(self, state: Optional[CpuState] = None) -> Dict[str, int]:
        """
        レジスタ値を辞書形式で返す。stateを省略した場合は現在の状態を対象とする。
        トレーサがCPUの内部構造を知らなくても値を表示できるようにするために使用される。
        """
        pass

    @abstractmethod
    def get_register_layout(self) -> List[RegisterLayoutInfo]:
        pass

    @abstractmethod
    def get_flag_state(self, state: Optional[CpuState] = None) -> Dict[str, bool]:
        """
        フラグ名と真偽値の辞書を返す。stateを省略した場合は現在の状態を対象とする。
        """
        pass

    @abstractmethod
    def disassemble(self, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
        """
        指定されたメモリ範囲を逆アセンブルし、(address, hex_bytes, mnemonic) のタプルリストを返す。
        """
        pass
