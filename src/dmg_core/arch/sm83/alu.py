"""
SM83 ALU (算術論理演算ユニット)。

全ての演算は状態を持たない純粋関数で、結果の値と4つのフラグ（Z, N, H, C）を
AluResultとしてまとめて返します。フラグを整数のままALUの外へ漏らすことはありません。
"""
from enum import Enum
from typing import NamedTuple, Optional

from dmg_core.common import bits
from dmg_core.arch.sm83.registers import Flag


# @intent:data_structure Z, N, H, Cの4フラグ。
class Flags(NamedTuple):
    z: bool = False
    n: bool = False
    h: bool = False
    c: bool = False

    # @intent:responsibility Fレジスタの形式（ZNHC0000）に変換します。
    def to_byte(self) -> int:
        return mask_znhc(self.z, self.n, self.h, self.c)

    @classmethod
    def from_byte(cls, f: int) -> "Flags":
        return cls(
            z=bits.test(f, Flag.Z.index),
            n=bits.test(f, Flag.N.index),
            h=bits.test(f, Flag.H.index),
            c=bits.test(f, Flag.C.index),
        )


# @intent:data_structure ALU演算の結果値とフラグの組。
class AluResult(NamedTuple):
    value: int
    flags: Flags


# @intent:responsibility ローテートの方向を表します。
class RotDir(Enum):
    LEFT = 1
    RIGHT = -1


# @intent:responsibility 命令ごとに各フラグの値をどこから取るかを表します。
class FlagSource(Enum):
    V0 = "V0"    # 強制的に0
    V1 = "V1"    # 強制的に1
    ALU = "ALU"  # ALUの結果を採用
    CPU = "CPU"  # 直前のFレジスタの値を保持


def mask_znhc(z: bool, n: bool, h: bool, c: bool) -> int:
    """各フラグの真偽値からFレジスタのビットマスクを生成します。"""
    return ((Flag.Z.mask if z else 0)
            | (Flag.N.mask if n else 0)
            | (Flag.H.mask if h else 0)
            | (Flag.C.mask if c else 0))


def _result(value: int, z: bool, n: bool, h: bool, c: bool) -> AluResult:
    return AluResult(value, Flags(z, n, h, c))


# @intent:responsibility 8ビット加算（キャリー入力付き）を行います。
def add(l: int, r: int, carry_in: bool = False) -> AluResult:
    bits.check_bits8(l)
    bits.check_bits8(r)
    c0 = 1 if carry_in else 0
    value = (l + r + c0) & 0xFF
    h = (l & 0xF) + (r & 0xF) + c0 > 0xF
    c = l + r + c0 > 0xFF
    return _result(value, value == 0, False, h, c)


# @intent:responsibility 16ビット加算を行い、H/Cを下位バイトから計算します。
# @intent:rationale ADD SP,e8 / LD HL,SP+e8 / INC rr の仕様で、Z/Nは常に0になります。
def add16_low(l: int, r: int) -> AluResult:
    bits.check_bits16(l)
    bits.check_bits16(r)
    value = (l + r) & 0xFFFF
    h = (l & 0xF) + (r & 0xF) > 0xF
    c = (l & 0xFF) + (r & 0xFF) > 0xFF
    return _result(value, False, False, h, c)


# @intent:responsibility 16ビット加算を行い、H/Cを上位バイトから（下位のキャリーを伝播して）計算します。
def add16_high(l: int, r: int) -> AluResult:
    bits.check_bits16(l)
    bits.check_bits16(r)
    value = (l + r) & 0xFFFF
    low_carry = 1 if (l & 0xFF) + (r & 0xFF) > 0xFF else 0
    h = bits.extract(l, 8, 4) + bits.extract(r, 8, 4) + low_carry > 0xF
    c = (l >> 8) + (r >> 8) + low_carry > 0xFF
    return _result(value, False, False, h, c)


# @intent:responsibility 8ビット減算（ボロー入力付き）を行います。
def sub(l: int, r: int, borrow_in: bool = False) -> AluResult:
    bits.check_bits8(l)
    bits.check_bits8(r)
    b0 = 1 if borrow_in else 0
    value = (l - r - b0) & 0xFF
    h = (r & 0xF) + b0 > (l & 0xF)
    c = r + b0 > l
    return _result(value, value == 0, True, h, c)


# @intent:responsibility 直前の加減算結果をBCD（二進化十進）に補正します（DAA）。
# @intent:rationale 補正値の符号はNフラグに従い、Nが立っていれば減算、そうでなければ加算します。
def bcd_adjust(v: int, n: bool, h: bool, c: bool) -> AluResult:
    bits.check_bits8(v)
    fix_low = h or (not n and (v & 0xF) > 9)
    fix_high = c or (not n and v > 0x99)
    fix = (0x60 if fix_high else 0) + (0x06 if fix_low else 0)
    value = (v - fix if n else v + fix) & 0xFF
    return _result(value, value == 0, n, False, fix_high)


def and_(l: int, r: int) -> AluResult:
    """論理積。Hは常に1、NとCは常に0です。"""
    bits.check_bits8(l)
    bits.check_bits8(r)
    value = l & r
    return _result(value, value == 0, False, True, False)


def or_(l: int, r: int) -> AluResult:
    bits.check_bits8(l)
    bits.check_bits8(r)
    value = l | r
    return _result(value, value == 0, False, False, False)


def xor(l: int, r: int) -> AluResult:
    bits.check_bits8(l)
    bits.check_bits8(r)
    value = l ^ r
    return _result(value, value == 0, False, False, False)


# @intent:responsibility 1ビット左シフトします。Cは押し出されたビット7です。
def shift_left(v: int) -> AluResult:
    bits.check_bits8(v)
    value = (v << 1) & 0xFF
    return _result(value, value == 0, False, False, bits.test(v, 7))


# @intent:responsibility 符号を保ったまま1ビット右シフトします。Cは押し出されたビット0です。
def shift_right_arithmetic(v: int) -> AluResult:
    bits.check_bits8(v)
    value = (bits.sign_extend8(v) >> 1) & 0xFF
    return _result(value, value == 0, False, False, bits.test(v, 0))


def shift_right_logical(v: int) -> AluResult:
    bits.check_bits8(v)
    value = v >> 1
    return _result(value, value == 0, False, False, bits.test(v, 0))


# @intent:responsibility 8ビットのローテート、またはキャリーを経由する9ビットのローテートを行います。
# @intent:rationale carryがNoneなら8ビット回転、真偽値が与えられればキャリーを9ビット目として回転します。
def rotate(direction: RotDir, v: int, carry: Optional[bool] = None) -> AluResult:
    bits.check_bits8(v)
    if carry is None:
        value = bits.rotate(8, v, direction.value)
        ejected = bits.test(v, 7 if direction is RotDir.LEFT else 0)
        return _result(value, value == 0, False, False, ejected)

    wide = bits.rotate(9, ((1 if carry else 0) << 8) | v, direction.value)
    value = wide & 0xFF
    return _result(value, value == 0, False, False, bits.test(wide, 8))


def swap(v: int) -> AluResult:
    """上位ニブルと下位ニブルを入れ替えます。"""
    bits.check_bits8(v)
    value = ((v & 0x0F) << 4) | (v >> 4)
    return _result(value, value == 0, False, False, False)


# @intent:responsibility 指定ビットをテストし、ビットが0ならZを立てます。
# @intent:post-condition Cは常にFalseで返すため、呼び出し側は直前のCを保持する必要があります。
def test_bit(v: int, index: int) -> AluResult:
    if not 0 <= index < 8:
        raise IndexError(f"Bit index {index} out of range [0, 7].")
    bits.check_bits8(v)
    return _result(0, not bits.test(v, index), False, True, False)
