"""
例外階層の定義。

イメージの読み書き失敗、設定ファイルの不備、そして実行時の
「不正なプログラム」状態（EvmFault）を区別して表現します。
"""


# @intent:responsibility パッケージ全体の基底例外。
class EvmError(Exception):
    pass


class ImageError(EvmError):
    pass


# @intent:responsibility イメージファイルのロード失敗を表します。実行開始前に発生し、プロセスは終了コード1で終了します。
class ImageLoadError(ImageError, ValueError):
    pass


# @intent:responsibility イメージファイルの保存失敗を表します。実行は既に完了しているため致命的ではありません。
class ImageSaveError(ImageError, OSError):
    pass


class ConfigError(EvmError, ValueError):
    pass


# @intent:responsibility 不正なプログラム（malformed program）による実行時フォールトの基底クラス。
# @intent:rationale プロセスを即座に落とすassertの代わりに、Snapshot経由で観測可能な構造化フォールトとして扱います。
class EvmFault(EvmError):
    """
    実行中のプログラムが不正であることを示すフォールト。
    発生したステップでマシンはFAULTED状態に遷移し、以降の命令は実行されません。
    """
    def __init__(self, message: str, pc: int = -1):
        super().__init__(message)
        self.pc = pc


# @intent:responsibility 書き込み先オペランドがリテラルである等、オペランドのエンコーディング違反を表します。
class EncodingFault(EvmFault, ValueError):
    pass


# @intent:responsibility 未定義（または予約済み）のI/Oチャネルが指定されたことを表します。
class UnsupportedChannelError(EncodingFault):
    pass


# @intent:responsibility アドレス空間の外側を指すPCや参照を表します。
class AddressFault(EvmFault, IndexError):
    pass
