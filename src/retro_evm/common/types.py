"""
共通の型定義を提供するモジュール。
プロジェクト全体で使用される汎用的な型エイリアスなどを定義します。
"""
from typing import Callable, List, NamedTuple, TYPE_CHECKING

if TYPE_CHECKING:
    from retro_evm.core.snapshot import Snapshot

# @intent:data_structure 1ステップごとにSnapshotを受け取るオブザーバの型エイリアス。
# トレーサ(debugger)やテストが実行ループに差し込むフックとして使用します。
StepObserver = Callable[["Snapshot"], None]

# @intent:data_structure 単一のレジスタの表示定義。ダンプ表示がカラムを生成するために使用される。
class RegisterInfo(NamedTuple):
    name: str
    width: int  # ビット幅

# @intent:data_structure レジスタグループの表示定義。関連するレジスタ（例: "General"）をまとめる。
class RegisterLayoutInfo(NamedTuple):
    group_name: str
    registers: List[RegisterInfo]
