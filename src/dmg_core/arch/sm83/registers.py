"""
SM83 レジスタファイル。

レジスタ名（閉じた列挙型）から固定長のバイト配列へのO(1)アクセスを提供します。
列挙型の宣言順には依存せず、各メンバーが明示的なスロット番号を持ちます。
"""
from enum import Enum
from typing import Generic, Type, TypeVar, Union

from dmg_core.common import bits


# @intent:responsibility 8ビットレジスタとそのスロット番号を定義します。
class Reg(Enum):
    A = 0
    F = 1
    B = 2
    C = 3
    D = 4
    E = 5
    H = 6
    L = 7

    @property
    def index(self) -> int:
        return self.value


# @intent:responsibility 16ビットのレジスタペアを (上位, 下位) の組として定義します。
class Reg16(Enum):
    AF = (Reg.A, Reg.F)
    BC = (Reg.B, Reg.C)
    DE = (Reg.D, Reg.E)
    HL = (Reg.H, Reg.L)

    @property
    def high(self) -> Reg:
        return self.value[0]

    @property
    def low(self) -> Reg:
        return self.value[1]


# @intent:responsibility Fレジスタ内の各フラグのビット位置を定義します。
class Flag(Enum):
    C = 4
    H = 5
    N = 6
    Z = 7

    @property
    def index(self) -> int:
        return self.value

    @property
    def mask(self) -> int:
        return 1 << self.value


E = TypeVar("E", bound=Enum)


# @intent:responsibility 列挙型で指定されたレジスタ群の値を保持します。
class RegisterFile(Generic[E]):
    """
    8ビットセルの固定長配列。値の設定時に範囲外であればValueErrorを送出します。
    """
    def __init__(self, registers: Type[E]):
        self._registers = registers
        self._file = bytearray(len(registers))

    def get(self, reg: E) -> int:
        return self._file[reg.index]

    # @intent:pre-condition valueは8ビット値である必要があります。黙って丸めることはしません。
    def set(self, reg: E, value: int) -> None:
        self._file[reg.index] = bits.check_bits8(value)

    def test_bit(self, reg: E, bit: Union[int, Flag]) -> bool:
        index = self._bit_index(bit)
        return bits.test(self.get(reg), index)

    def set_bit(self, reg: E, bit: Union[int, Flag], value: bool) -> None:
        index = self._bit_index(bit)
        self.set(reg, bits.set_bit(self.get(reg), index, value))

    # @intent:pre-condition ビット番号は8ビットセルの範囲[0, 7]内である必要があります。
    @staticmethod
    def _bit_index(bit: Union[int, Flag]) -> int:
        index = bit.index if isinstance(bit, Flag) else bit
        if not 0 <= index < 8:
            raise IndexError(f"Bit index {index} out of range [0, 7].")
        return index

    # @intent:responsibility 全てのセルを0に戻します（電源投入時）。
    def reset(self) -> None:
        for i in range(len(self._file)):
            self._file[i] = 0
