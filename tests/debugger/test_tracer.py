# tests/debugger/test_tracer.py
"""
StateTracerの単体テスト。
richのConsoleをStringIOに向けて、ダンプの内容を検証します。
一時停止の入力はBytesIOを入力とするConsoleTerminal経由で与えます。
"""
import io

import pytest
from rich.console import Console

from retro_evm.transport.bus import Bus, RAM
from retro_evm.arch.evm.cpu import EvmCpu
from retro_evm.arch.evm.opcodes import Opcode
from retro_evm.arch.evm.operand import encode_literal as num_, encode_reference as addr_
from retro_evm.debugger.tracer import StateTracer
from retro_evm.arch.evm.state import FL_ZERO
from retro_evm.transport.console import ConsoleTerminal

# @intent:test_suite トレーサが実行結果に影響を与えずに状態を描画することを検証します。

def _terminal(data: bytes = b"", interactive: bool = False) -> ConsoleTerminal:
    return ConsoleTerminal(stdin=io.BytesIO(data), stdout=io.BytesIO(), interactive=interactive)

@pytest.fixture
def setup():
    bus = Bus()
    bus.register_device(0x00, 0x1F, RAM(0x20))
    program = (Opcode.MOV, num_(0x2A), addr_(1), Opcode.SUS)
    for i, b in enumerate(program):
        bus.load(i, int(b))
    cpu = EvmCpu(bus)
    out = io.StringIO()
    console = Console(file=out, width=120, color_system=None, highlight=False)
    return cpu, out, console


class TestStateTracer:
    def test_start_dumps_initial_state(self, setup):
        cpu, out, console = setup
        StateTracer(cpu, console=console, pause=False, terminal=_terminal()).start()
        text = out.getvalue()
        assert "PC" in text and "INST" in text and "R7" in text
        assert "MOV" in text
        assert "MEM" in text
        assert "0000  01<" in text

    def test_dump_after_each_step(self, setup):
        cpu, out, console = setup
        cpu.add_observer(StateTracer(cpu, console=console, pause=False, terminal=_terminal()))
        cpu.run()
        text = out.getvalue()
        assert "2a" in text
        assert "SUS" in text
        assert "0010  " in text

    def test_tracing_does_not_change_execution(self, setup):
        cpu, _, console = setup
        cpu.add_observer(StateTracer(cpu, console=console, pause=False, terminal=_terminal()))
        result = cpu.run()
        assert result.steps == 2
        assert cpu.get_state().registers[1] == 0x2A
        assert cpu.get_state().pc == 4

    def test_fault_is_reported(self, setup):
        cpu, out, console = setup
        cpu.get_state().pc = 0x20
        cpu.add_observer(StateTracer(cpu, console=console, pause=False, terminal=_terminal()))
        cpu.run()
        assert "FAULT" in out.getvalue()

    def test_layout_columns_and_flags(self, setup):
        cpu, out, console = setup
        cpu.get_state().fr = FL_ZERO
        cpu.get_state().registers[7] = 0xAB
        StateTracer(cpu, console=console, pause=False, terminal=_terminal()).start()
        header, row = out.getvalue().splitlines()[:2]
        assert header.split() == ["PC", "FR", "INST"] + [f"R{i}" for i in range(8)] + ["FLAGS"]
        assert row.split()[-2:] == ["ab", "Z-"]

    def test_dump_uses_snapshot_state(self, setup):
        cpu, out, console = setup
        tracer = StateTracer(cpu, console=console, pause=False, terminal=_terminal())
        snapshot = cpu.step()
        cpu.get_state().registers[1] = 0x77
        tracer.dump(snapshot)
        assert "2a" in out.getvalue()
        assert "77" not in out.getvalue().splitlines()[1]

    def test_halt_is_reported(self, setup):
        cpu, out, console = setup
        cpu.add_observer(StateTracer(cpu, console=console, pause=False, terminal=_terminal()))
        cpu.run()
        assert "HALTED after 2 steps" in out.getvalue()

    def test_pause_waits_on_interactive_terminal(self, setup):
        cpu, _, console = setup
        waits = []
        tracer = StateTracer(cpu, console=console, pause=True,
                             terminal=_terminal(interactive=True), wait=lambda: waits.append(1))
        tracer.start()
        assert waits == [1]

    def test_no_pause_without_terminal(self, setup):
        cpu, _, console = setup
        waits = []
        tracer = StateTracer(cpu, console=console, pause=True,
                             terminal=_terminal(interactive=False), wait=lambda: waits.append(1))
        tracer.start()
        assert waits == []

    # @intent:test_case_shared_input 一時停止のEnter待ちが、数値入力で押し戻されたバイトを含めて端末から読み出すことを検証します。
    def test_pause_reads_through_terminal_pushback(self, setup):
        cpu, _, console = setup
        terminal = _terminal(b"7x\nnext", interactive=True)
        assert terminal.read_int() == 7

        StateTracer(cpu, console=console, pause=True, terminal=terminal).start()

        assert terminal.getc() == ord("n")
