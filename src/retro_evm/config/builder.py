import logging
from typing import Optional, Tuple
from retro_evm.common.errors import ConfigError
from retro_evm.transport.bus import Bus, RAM
from retro_evm.transport.console import ConsoleTerminal, CharacterPort, NumericPort
from retro_evm.core.cpu import AbstractCpu
from retro_evm.arch.evm.cpu import EvmCpu
from retro_evm.arch.evm.state import IoChannel, MAX_MEMORY_SIZE
from retro_evm.arch.evm.bootstrap import build_bootstrap_image
from retro_evm.loader.image import ImageLoader, MachineImage
from .models import SystemConfig

logger = logging.getLogger(__name__)

# @intent:responsibility システム構成（Config）に基づいて、Bus、Device、CPUを生成・接続し、イメージを適用します。
class SystemBuilder:
    def __init__(self, terminal: Optional[ConsoleTerminal] = None):
        self.terminal = terminal if terminal is not None else ConsoleTerminal()

    # @intent:responsibility 構成に従って初期イメージを用意します（ファイル、または組み込みブートストラップ）。
    # @intent:post-condition ファイルの検証に失敗した場合はImageLoadErrorが送出されます。
    def load_initial_image(self, config: SystemConfig) -> MachineImage:
        self._validate(config)
        if config.image.load:
            return ImageLoader().load_image(config.image.load, config.machine.memory_size)
        try:
            return build_bootstrap_image(config.machine.memory_size, config.machine.initial_pc)
        except ValueError as e:
            raise ConfigError(str(e)) from e

    def build_system(self, config: SystemConfig, image: Optional[MachineImage] = None) -> Tuple[AbstractCpu, Bus]:
        self._validate(config)
        if image is None:
            image = self.load_initial_image(config)

        bus = Bus()
        size = config.machine.memory_size
        bus.register_device(0x00, size - 1, RAM(size))

        bus.register_io_device(IoChannel.CHARACTER, CharacterPort(self.terminal))
        bus.register_io_device(IoChannel.NUMERIC, NumericPort(self.terminal))
        # IoChannel.STRING は予約済みのため接続しない

        cpu = EvmCpu(bus)
        self.apply_image(cpu, image)
        return cpu, bus

    # @intent:responsibility イメージのメモリ内容とPCをCPUに適用します。
    # @intent:rationale CPUをリセットしてから適用するため、フラグとレジスタは常に0から始まります。
    def apply_image(self, cpu: AbstractCpu, image: MachineImage) -> None:
        bus = cpu.bus
        if image.memsize != bus.memory_size():
            raise ValueError(f"image memory size {image.memsize} does not match bus memory size {bus.memory_size()}")
        for address, data in enumerate(image.memory):
            bus.load(address, data)
        cpu.reset()
        cpu.get_state().pc = image.pc
        logger.info("resuming core from %d", image.pc)

    # @intent:responsibility 現在のCPU状態を永続化用のイメージに変換します。
    def capture_image(self, cpu: AbstractCpu) -> MachineImage:
        return MachineImage(pc=cpu.get_state().pc, memory=cpu.bus.dump())

    def _validate(self, config: SystemConfig) -> None:
        if config.architecture != "EVM":
            raise ConfigError(f"Unsupported architecture: {config.architecture}")
        if not 0 < config.machine.memory_size <= MAX_MEMORY_SIZE:
            raise ConfigError(
                f"memory_size {config.machine.memory_size} must be in 1..{MAX_MEMORY_SIZE}")
