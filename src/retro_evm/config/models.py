from dataclasses import dataclass, field
from typing import Optional

from retro_evm.arch.evm.state import MAX_MEMORY_SIZE

@dataclass
class MachineConfig:
    memory_size: int = MAX_MEMORY_SIZE
    initial_pc: int = 0x00  # 組み込みブートストラップ使用時のみ有効

@dataclass
class TraceConfig:
    enabled: bool = False
    pause: bool = True  # 対話端末ではステップごとにEnter待ちを行う

@dataclass
class LoggingConfig:
    level: str = "WARNING"

@dataclass
class ImageConfig:
    load: Optional[str] = None  # Noneなら組み込みブートストラップ
    save: Optional[str] = None

@dataclass
class SystemConfig:
    architecture: str = "EVM"
    machine: MachineConfig = field(default_factory=MachineConfig)
    trace: TraceConfig = field(default_factory=TraceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    image: ImageConfig = field(default_factory=ImageConfig)
