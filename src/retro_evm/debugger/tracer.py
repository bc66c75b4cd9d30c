# retro_evm/debugger/tracer.py
"""
ステップトレーサ。

実行ループにオブザーバとして接続され、各ステップ後のCPU状態とメモリを
人間が読める形式でコンソールにダンプします。実行の正しさには一切関与しません。
"""
from typing import Callable, List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from retro_evm.core.cpu import AbstractCpu
from retro_evm.core.snapshot import Snapshot
from retro_evm.transport.console import ConsoleTerminal

# @intent:constant メモリダンプ1行あたりのバイト数。
DUMP_COLUMNS = 16


# @intent:responsibility Snapshotを受け取り、レジスタ表とメモリのHEXダンプを表示します。
class StateTracer:
    """
    AbstractCpu.add_observer() に登録して使用するトレーサ。
    pause=True かつ端末が対話的な場合、ステップごとにEnterの入力を待ちます。
    Enterの待機はプログラムの入力と同じConsoleTerminalを経由して読み出します。
    """
    def __init__(self, cpu: AbstractCpu, console: Optional[Console] = None, pause: bool = True,
                 terminal: Optional[ConsoleTerminal] = None, wait: Optional[Callable[[], None]] = None):
        self._cpu = cpu
        self.console = console or Console(highlight=False)
        self._terminal = terminal if terminal is not None else ConsoleTerminal()
        self._pause = pause
        self._wait = wait or self._wait_for_enter

    def __call__(self, snapshot: Snapshot) -> None:
        self.dump(snapshot)

    # @intent:responsibility 実行開始前の状態をダンプします。
    def start(self) -> None:
        self.dump(self._cpu.capture_snapshot())

    def dump(self, snapshot: Snapshot) -> None:
        self.console.print(self.render_registers(snapshot))
        self.console.print(self.render_memory(snapshot))
        if snapshot.fault is not None:
            self.console.print(f"[bold red]FAULT[/bold red] at {snapshot.fault.pc:02x}: {snapshot.fault}")
        elif snapshot.halted:
            self.console.print(f"{snapshot.metadata.status.value} after {snapshot.metadata.step_count} steps")
        if self._should_pause():
            self._wait()

    # @intent:responsibility CPUが公開するレジスタレイアウトに従い、レジスタ値・次の命令・フラグを1行の表として描画します。
    def render_registers(self, snapshot: Snapshot) -> Table:
        values = self._cpu.get_register_map(snapshot.state)
        table = Table(box=None, show_edge=False, pad_edge=False)
        cells: List[str] = []
        for index, group in enumerate(self._cpu.get_register_layout()):
            for register in group.registers:
                table.add_column(register.name)
                digits = (register.width + 3) // 4
                cells.append(f"{values[register.name] & ((1 << register.width) - 1):0{digits}x}")
            if index == 0:
                table.add_column("INST")
                cells.append(self._next_instruction(snapshot.state.pc))
        table.add_column("FLAGS")
        flags = self._cpu.get_flag_state(snapshot.state)
        cells.append("".join(name if value else "-" for name, value in flags.items()))
        table.add_row(*cells)
        return table

    # @intent:responsibility メモリを16バイトずつ、PC位置に '<' を付けて描画します。
    def render_memory(self, snapshot: Snapshot) -> Text:
        pc = snapshot.state.pc
        text = Text("------------------------- MEM ------------------------\n")
        memory = snapshot.memory
        for row in range(0, len(memory), DUMP_COLUMNS):
            text.append(f"{row:04x}  ")
            for col in range(DUMP_COLUMNS):
                addr = row + col
                if addr >= len(memory):
                    break
                if col == 8:
                    text.append(" ")
                if addr == pc:
                    text.append(f"{memory[addr]:02x}<", style="bold reverse")
                else:
                    text.append(f"{memory[addr]:02x} ")
            text.append("\n")
        return text

    def _next_instruction(self, pc: int) -> str:
        listing = self._cpu.disassemble(pc, 1)
        if not listing:
            return "----"
        return listing[0][2].split(" ", 1)[0]

    def _should_pause(self) -> bool:
        return self._pause and self._terminal.interactive

    def _wait_for_enter(self) -> None:
        self.console.print("Press enter to continue...")
        self._terminal.read_line()
