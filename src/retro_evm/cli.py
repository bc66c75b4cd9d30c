# retro_evm/cli.py
"""
コマンドラインのエントリポイント。

イメージ（または組み込みブートストラップ）をロードしてCPUを実行し、
正常終了した場合は最終状態をイメージとして保存します。

終了コード: 0 = 正常終了, 1 = イメージ/設定のロード失敗, 2 = 不正なプログラムによるフォールト
"""
import argparse
import logging
import sys
from typing import List, Optional

from retro_evm.common.errors import ConfigError, ImageLoadError, ImageSaveError
from retro_evm.config.builder import SystemBuilder
from retro_evm.config.loader import ConfigLoader
from retro_evm.config.models import SystemConfig
from retro_evm.core.snapshot import MachineStatus
from retro_evm.debugger.tracer import StateTracer
from retro_evm.loader.image import ImageWriter

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_LOAD_FAILURE = 1
EXIT_FAULT = 2


# @intent:responsibility 位置引数のイメージと -l のうち、後に指定された方をロード対象として記録します。
class LastImageAction(argparse.Action):
    def __call__(self, parser, namespace, values, option_string=None):
        if values is not None:
            namespace.load = values


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="retro-evm",
        description="Run a retro-evm machine image (or the built-in bootstrap image).",
    )
    parser.add_argument("image", nargs="?", action=LastImageAction,
                        help="image file to load (the last of IMAGE and -l wins)")
    parser.add_argument("-l", "--load", metavar="IMAGE", action=LastImageAction,
                        help="image file to load (the last of IMAGE and -l wins)")
    parser.add_argument("-s", "--save", metavar="IMAGE", help="save the final state into a new image file")
    parser.add_argument("-d", "--debug", action="store_true", help="dump the machine state after every step")
    parser.add_argument("--no-pause", action="store_true", help="do not wait for Enter between dumps")
    parser.add_argument("-c", "--config", metavar="YAML", help="system configuration file")
    parser.add_argument("--log-level", metavar="LEVEL", help="logging level (DEBUG, INFO, WARNING, ...)")
    return parser


# @intent:responsibility コマンドライン引数で設定ファイルの値を上書きします。
def apply_arguments(config: SystemConfig, args: argparse.Namespace) -> SystemConfig:
    if args.load:
        config.image.load = args.load
    if args.save:
        config.image.save = args.save
    if args.debug:
        config.trace.enabled = True
        # 元の -d と同様に、ロード/保存の経過も表示する
        if args.log_level is None and config.logging.level == "WARNING":
            config.logging.level = "INFO"
    if args.no_pause:
        config.trace.pause = False
    if args.log_level:
        config.logging.level = args.log_level.upper()
    return config


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        raise ConfigError(f"unknown logging level {level_name}")
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader().load_from_file(args.config) if args.config else SystemConfig()
        apply_arguments(config, args)
        configure_logging(config.logging.level)
        builder = SystemBuilder()
        image = builder.load_initial_image(config)
    except (ConfigError, ImageLoadError) as e:
        logging.basicConfig(format="%(levelname)s: %(message)s")
        logger.error("error: %s", e)
        return EXIT_LOAD_FAILURE

    cpu, _ = builder.build_system(config, image)
    if config.trace.enabled:
        tracer = StateTracer(cpu, pause=config.trace.pause, terminal=builder.terminal)
        cpu.add_observer(tracer)
        tracer.start()

    result = cpu.run()
    if result.status == MachineStatus.FAULTED:
        logger.error("malformed program at pc %d: %s", result.fault.pc, result.fault)
        return EXIT_FAULT

    if config.image.save:
        try:
            ImageWriter().save_image(config.image.save, builder.capture_image(cpu))
        except ImageSaveError as e:
            logger.error("error: %s", e)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
