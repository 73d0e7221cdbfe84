# tests/common/test_bits.py
"""
dmg_core.common.bitsモジュールの単体テスト。
"""
import pytest
from dmg_core.common import bits

# @intent:test_suite ビット操作ユーティリティの結果と範囲外引数の扱いを検証します。


class TestChecks:
    # @intent:test_case_valid 範囲内の値はそのまま返されることを検証します。
    def test_check_bits_returns_value(self):
        assert bits.check_bits8(0xAB) == 0xAB
        assert bits.check_bits16(0xBEEF) == 0xBEEF

    # @intent:test_case_invalid 範囲外の値は丸められずValueErrorになることを検証します。
    @pytest.mark.parametrize("value", [-1, 0x100, 1.0, None])
    def test_check_bits8_rejects(self, value):
        with pytest.raises(ValueError):
            bits.check_bits8(value)

    @pytest.mark.parametrize("value", [-1, 0x10000])
    def test_check_bits16_rejects(self, value):
        with pytest.raises(ValueError, match="is not a 16-bit value"):
            bits.check_bits16(value)


class TestBitAccess:
    def test_mask_and_test(self):
        assert bits.mask(0) == 0x01
        assert bits.mask(7) == 0x80
        assert bits.test(0b1010, 1) is True
        assert bits.test(0b1010, 2) is False

    def test_set_bit(self):
        assert bits.set_bit(0x00, 3, True) == 0x08
        assert bits.set_bit(0xFF, 0, False) == 0xFE
        assert bits.set_bit(0x08, 3, True) == 0x08

    # @intent:test_case_invalid ビット番号が[0, 31]の外ならIndexErrorになることを検証します。
    @pytest.mark.parametrize("index", [-1, 32])
    def test_index_out_of_range(self, index):
        with pytest.raises(IndexError):
            bits.mask(index)

    def test_clip_and_extract(self):
        assert bits.clip(4, 0xABCD) == 0xD
        assert bits.clip(0, 0xFF) == 0
        assert bits.extract(0xABCD, 4, 8) == 0xBC
        assert bits.extract(0x12345678, 16, 16) == 0x1234

    def test_extract_invalid_range(self):
        with pytest.raises(IndexError):
            bits.extract(0xFF, 30, 4)
        with pytest.raises(ValueError):
            bits.clip(33, 0xFF)


class TestTransforms:
    # @intent:test_case_rotate 正の距離は左、負の距離は右へのローテートであることを検証します。
    def test_rotate(self):
        assert bits.rotate(8, 0x80, 1) == 0x01
        assert bits.rotate(8, 0x01, -1) == 0x80
        assert bits.rotate(4, 0b0001, 3) == 0b1000
        assert bits.rotate(8, 0x5A, 8) == 0x5A

    def test_sign_extend8(self):
        assert bits.sign_extend8(0x7F) == 127
        assert bits.sign_extend8(0x80) == -128
        assert bits.sign_extend8(0xFE) == -2

    def test_reverse_and_complement(self):
        assert bits.reverse8(0b00000001) == 0b10000000
        assert bits.reverse8(0b11010000) == 0b00001011
        assert bits.complement8(0x0F) == 0xF0

    def test_make16(self):
        assert bits.make16(0x12, 0x34) == 0x1234
        with pytest.raises(ValueError):
            bits.make16(0x100, 0)
