# retro_evm/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、メモリプールとI/Oチャネルを抽象化し、
読み書きアクセスを適切なデバイスに委譲する責務を負います。
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Tuple
from dataclasses import dataclass
from enum import Enum

from retro_evm.common.errors import UnsupportedChannelError

# @intent:responsibility バスアクセスを記録するためのタイプを定義します。
class BusAccessType(Enum):
    READ = "READ"
    WRITE = "WRITE"
    IO_READ = "IO_READ"
    IO_WRITE = "IO_WRITE"

# @intent:responsibility 個々のバスアクセス操作を記録します。
@dataclass(frozen=True)
class BusAccess:
    """
    バス上で行われた単一のアクセス（読み込みまたは書き込み）を記録するデータクラス。
    I/Oアクセスの場合、addressにはチャネル番号が入ります。
    """
    address: int
    data: int
    access_type: BusAccessType

# @intent:responsibility バスの抽象デバイスインターフェースを定義します。
class Device(ABC):
    """
    バスに接続されるメモリデバイスの抽象基底クラス。
    """
    # @intent:pre-condition アドレスはデバイスの有効範囲内である必要があります。
    @abstractmethod
    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。
        アドレスはデバイス内でのオフセットとして扱われます。
        """
        pass

    @abstractmethod
    def write(self, address: int, data: int) -> None:
        """
        指定されたアドレスに8bitのデータを書き込みます。
        アドレスはデバイス内でのオフセットとして扱われます。
        """
        pass

# @intent:responsibility I/Oチャネルに接続されるデバイスのインターフェースを定義します。
class IoDevice(ABC):
    """
    論理I/Oチャネル（文字、数値）の入出力を担うデバイス。
    読み出しは入力が得られるまでブロックしてもかまいません。
    """
    @abstractmethod
    def read(self) -> int:
        pass

    @abstractmethod
    def write(self, data: int) -> None:
        pass

# @intent:responsibility 基本的なRAMデバイスの機能を提供します。
class RAM(Device):
    """
    メモリプールを表すRAMデバイス。
    """
    # @intent:pre-condition sizeは正の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or size <= 0:
            raise ValueError("RAM size must be a positive integer.")
        self._memory = bytearray(size)
        self._size = size

    def read(self, address: int) -> int:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        return self._memory[address]

    def write(self, address: int, data: int) -> None:
        if not 0 <= address < self._size:
            raise IndexError(f"Address {address} out of bounds for RAM of size {self._size}.")
        if not 0 <= data <= 0xFF:
            raise ValueError(f"Data {data} is not an 8-bit value.")
        self._memory[address] = data

    def get_size(self) -> int:
        return self._size

# @intent:responsibility メモリアドレス空間とI/Oチャネルを管理し、デバイスへのアクセスをディスパッチする共通バス。
# @intent:rationale バスの全てのアクセスを記録し、Snapshotに含めることでシステムの観測可能性を高めます。
class Bus:
    """
    メモリアドレス空間とI/Oチャネルを管理し、デバイスへのアクセスをディスパッチする共通バス。
    バス上で行われた全てのメモリ/IOアクセスを記録する機能を提供します。
    """
    def __init__(self):
        # メモリマップ: (start_address, end_address, device) のタプルリスト
        self._memory_map: List[Tuple[int, int, Device]] = []
        self._io_map: Dict[int, IoDevice] = {}
        self._bus_activity_log: List[BusAccess] = []

    def _log_access(self, address: int, data: int, access_type: BusAccessType) -> None:
        self._bus_activity_log.append(BusAccess(address=address, data=data, access_type=access_type))

    # @intent:responsibility 記録されたバスアクティビティログを取得し、クリアします。
    def get_and_clear_activity_log(self) -> List[BusAccess]:
        log = self._bus_activity_log
        self._bus_activity_log = []
        return log

    # @intent:responsibility 指定されたアドレス範囲にデバイスを登録します。
    # @intent:pre-condition start_address <= end_addressかつ非負であり、deviceはDeviceのインスタンスである必要があります。
    # @intent:rationale アドレス範囲の重複チェックは行いません。これはBusの責務ではなく、システム構築側で管理されるべきと判断しました。
    def register_device(self, start_address: int, end_address: int, device: Device) -> None:
        """
        指定されたアドレス範囲にデバイスを登録します。
        RAMを登録する場合、そのサイズが指定されたアドレス範囲と一致する必要があります。
        """
        if not (0 <= start_address <= end_address):
            raise ValueError("Invalid address range: start_address must be <= end_address and non-negative.")
        if not isinstance(device, Device):
            raise TypeError("Device must be an instance of a class derived from Device.")

        if isinstance(device, RAM):
            expected_size = end_address - start_address + 1
            if device.get_size() != expected_size:
                raise ValueError(
                    f"Registered {type(device).__name__} device size ({device.get_size()} bytes) does not match "
                    f"the specified address range size ({expected_size} bytes)."
                )

        self._memory_map.append((start_address, end_address, device))

    # @intent:responsibility 指定されたI/Oチャネルにデバイスを接続します。
    def register_io_device(self, channel: int, device: IoDevice) -> None:
        if not isinstance(device, IoDevice):
            raise TypeError("I/O device must be an instance of a class derived from IoDevice.")
        self._io_map[int(channel)] = device

    # @intent:responsibility マップされたメモリの総バイト数（最大アドレス+1）を返します。
    def memory_size(self) -> int:
        if not self._memory_map:
            return 0
        return max(end for _, end, _ in self._memory_map) + 1

    # @intent:post-condition デバイスが見つからなかった場合、IndexErrorを発生させます。
    def _find_device(self, address: int) -> Tuple[Device, int]:
        for start, end, device in self._memory_map:
            if start <= address <= end:
                return device, address - start
        raise IndexError(f"Address {address:#04x} not mapped to any device.")

    def read(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します。
        アクセスはログに記録されます。
        """
        device, offset = self._find_device(address)
        data = device.read(offset)
        self._log_access(address, data, BusAccessType.READ)
        return data

    # @intent:responsibility ログを記録せずに指定されたアドレスからデータを読み出します。
    def peek(self, address: int) -> int:
        """
        指定されたアドレスから8bitのデータを読み出します（ログ記録なし）。
        トレーサや逆アセンブラなどのインスペクタ用。
        """
        device, offset = self._find_device(address)
        return device.read(offset)

    def write(self, address: int, data: int) -> None:
        device, offset = self._find_device(address)
        device.write(offset, data)
        self._log_access(address, data, BusAccessType.WRITE)

    # @intent:responsibility ログを記録せずにデータを書き込みます。イメージのロード専用です。
    def load(self, address: int, data: int) -> None:
        device, offset = self._find_device(address)
        device.write(offset, data)

    # @intent:responsibility メモリプール全体の内容をログなしで取得します。
    def dump(self) -> bytes:
        return bytes(self.peek(addr) for addr in range(self.memory_size()))

    # @intent:responsibility 指定されたI/Oチャネルから値を読み出します。
    # @intent:post-condition 未接続のチャネルはUnsupportedChannelErrorとなります（0を返して黙殺しません）。
    def read_io(self, channel: int) -> int:
        device = self._io_map.get(channel)
        if device is None:
            raise UnsupportedChannelError(f"Unsupported I/O channel {channel}")
        data = device.read()
        self._log_access(channel, data, BusAccessType.IO_READ)
        return data

    def write_io(self, channel: int, data: int) -> None:
        device = self._io_map.get(channel)
        if device is None:
            raise UnsupportedChannelError(f"Unsupported I/O channel {channel}")
        device.write(data)
        self._log_access(channel, data, BusAccessType.IO_WRITE)
