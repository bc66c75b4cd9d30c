"""
EVM逆アセンブラモジュール。

メモリ上のバイナリデータを解析し、ニーモニック形式に変換します。
"""
from typing import List, Tuple
from retro_evm.transport.bus import Bus
from retro_evm.arch.evm.instructions import decode_opcode

# @intent:responsibility 指定されたメモリ範囲のバイナリデータを解析し、アドレスとニーモニックのリストを返します。
def disassemble(bus: Bus, start_addr: int, length: int) -> List[Tuple[int, str, str]]:
    """
    メモリ上のデータを読み取り、(アドレス, 16進ダンプ, ニーモニック) のタプルのリストを返します。
    """
    result = []
    current_addr = start_addr
    end_addr = min(start_addr + length, bus.memory_size())

    while current_addr < end_addr:
        try:
            opcode = bus.peek(current_addr)
            operation = decode_opcode(opcode, bus, current_addr + 1)

            hex_bytes = [f"{opcode:02X}"]
            for b in operation.operand_bytes:
                hex_bytes.append(f"{b:02X}")

            mnemonic = operation.mnemonic
            if operation.operands:
                mnemonic += " " + ", ".join(operation.operands)

            result.append((current_addr, " ".join(hex_bytes), mnemonic))
            current_addr += operation.length

        except IndexError:
            # オペランドがメモリ末尾を越える場合など
            result.append((current_addr, f"{bus.peek(current_addr):02X}", "ERR"))
            current_addr += 1

    # デコードのための読み出しをバスアクティビティとして残さない
    bus.get_and_clear_activity_log()
    return result
