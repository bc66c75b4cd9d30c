# tests/arch/evm/test_operand.py
"""
retro_evm.arch.evm.operandモジュールの単体テスト。
"""
import pytest

from retro_evm.arch.evm.operand import (
    Literal, Reference, decode_operand, encode_literal, encode_reference,
)

# @intent:test_suite タグ付きオペランド（リテラル/参照）のエンコード・デコードを検証します。

class TestDecodeOperand:
    def test_odd_byte_is_literal(self):
        assert decode_operand(0x0B) == Literal(5)
        assert decode_operand(0xFF) == Literal(127)

    def test_even_byte_is_reference(self):
        assert decode_operand(0x00) == Reference(0)
        assert decode_operand(0xF8) == Reference(124)

    def test_literal_and_reference_never_compare_equal(self):
        assert Literal(3) != Reference(3)

    def test_literal_roundtrip_for_all_values(self):
        for n in range(128):
            assert decode_operand(encode_literal(n)) == Literal(n)

    def test_reference_roundtrip(self):
        assert decode_operand(encode_reference(7)) == Reference(7)
        assert decode_operand(encode_reference(127)) == Reference(127)

class TestEncode:
    def test_encode_literal(self):
        assert encode_literal(0) == 1
        assert encode_literal(5) == 11

    @pytest.mark.parametrize("n", [-1, 128, 300])
    def test_encode_literal_out_of_range(self, n):
        with pytest.raises(ValueError):
            encode_literal(n)

    @pytest.mark.parametrize("n", [-1, 128])
    def test_encode_reference_out_of_range(self, n):
        with pytest.raises(ValueError):
            encode_reference(n)

    def test_operand_text(self):
        assert str(Literal(5)) == "#5"
        assert str(Reference(3)) == "R3"
        assert str(Reference(120)) == "[120]"
