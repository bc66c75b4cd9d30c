# retro_evm/loader/image.py
"""
マシンイメージのローダー/ライター。

PCとメモリプール全体を、固定レイアウトのバイナリファイルとして保存・復元します。

    magic    : u32 = 0x2017
    size     : u32 = 16 + memsize
    memsize  : u32
    pc       : u32
    payload  : memsize バイト

ヘッダはホストのネイティブバイトオーダーで書き込まれます。
フラグとレジスタは保存されず、ロードのたびに0から再開します（既知の制約です）。
"""
import logging
import struct
from dataclasses import dataclass

from retro_evm.common.errors import ImageLoadError, ImageSaveError

logger = logging.getLogger(__name__)

MAGIC = 0x2017
HEADER_FORMAT = "=IIII"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)


# @intent:data_structure イメージファイルのヘッダ。
@dataclass(frozen=True)
class ImageHeader:
    magic: int
    size: int
    memsize: int
    pc: int

    def pack(self) -> bytes:
        return struct.pack(HEADER_FORMAT, self.magic, self.size, self.memsize, self.pc)

    @classmethod
    def unpack(cls, data: bytes) -> "ImageHeader":
        return cls(*struct.unpack(HEADER_FORMAT, data))


# @intent:data_structure 永続化の対象となる {PC, メモリ内容} の組。
@dataclass(frozen=True)
class MachineImage:
    pc: int
    memory: bytes

    @property
    def memsize(self) -> int:
        return len(self.memory)


class ImageLoader:
    """
    イメージファイルを検証しながら読み込み、MachineImageを返すローダー。
    """
    # @intent:responsibility イメージファイルを読み込みます。
    # @intent:post-condition 検証に失敗した場合はImageLoadErrorを送出し、マシン状態は一切生成されません。
    def load_image(self, file_path: str, memory_size: int) -> MachineImage:
        logger.info("loading image from %s", file_path)
        try:
            with open(file_path, "rb") as f:
                raw_header = f.read(HEADER_SIZE)
                if len(raw_header) < HEADER_SIZE:
                    raise ImageLoadError(
                        f"{file_path}: short header read ({len(raw_header)} of {HEADER_SIZE} bytes)")
                header = ImageHeader.unpack(raw_header)
                self._validate_header(header, memory_size)
                payload = f.read(header.memsize)
        except OSError as e:
            raise ImageLoadError(f"{file_path}: {e.strerror or e}") from e

        if len(payload) < header.memsize:
            raise ImageLoadError(
                f"{file_path}: short payload read ({len(payload)} of {header.memsize} bytes)")
        return MachineImage(pc=header.pc, memory=payload)

    def _validate_header(self, header: ImageHeader, memory_size: int) -> None:
        if header.magic != MAGIC:
            raise ImageLoadError(f"bad magic {header.magic:x}")
        if header.memsize != memory_size:
            raise ImageLoadError(f"memory size mismatch {header.memsize} (expected {memory_size})")
        if header.pc >= header.memsize:
            raise ImageLoadError(f"pc {header.pc} beyond memory {header.memsize}")
        if header.size != HEADER_SIZE + header.memsize:
            logger.warning("image size field %d does not match %d, ignoring",
                           header.size, HEADER_SIZE + header.memsize)


class ImageWriter:
    """
    MachineImageを新規ファイルへ書き出すライター。既存ファイルは上書きしません。
    """
    # @intent:responsibility イメージを新規ファイルとして保存します。
    # @intent:post-condition 既存ファイル、権限エラー、書き込み不足はImageSaveErrorとして報告されます。
    def save_image(self, file_path: str, image: MachineImage) -> None:
        logger.info("saving image into new file %s", file_path)
        header = ImageHeader(magic=MAGIC, size=HEADER_SIZE + image.memsize,
                             memsize=image.memsize, pc=image.pc)
        data = header.pack() + image.memory
        try:
            with open(file_path, "xb") as f:
                written = f.write(data)
        except OSError as e:
            raise ImageSaveError(e.errno, f"{file_path}: {e.strerror or e}") from e
        if written != len(data):
            raise ImageSaveError(f"{file_path}: short write ({written} of {len(data)} bytes)")
