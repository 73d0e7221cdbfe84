# dmg_core/arch/sm83/state.py
"""
SM83 CPU固有の状態定義。

このモジュールは、SM83のレジスタファイル、フラグ、割り込みラッチを保持する
データ構造を定義します。実行エンジンはこの状態を排他的に所有し、
ディスパッチの各ステップに渡します。
"""
from dataclasses import dataclass, field
from enum import Enum

from dmg_core.core.state import CpuState
from dmg_core.common.bits import check_bits8, check_bits16
from dmg_core.arch.sm83.registers import Flag, Reg, Reg16, RegisterFile

# @intent:constant Fレジスタの有効ビット（上位4ビット）。下位ニブルは常に0です。
F_MASK = 0xF0

# @intent:constant 割り込みの調停に使うビット（5種類）。
INTERRUPT_MASK = 0b11111


# @intent:responsibility 割り込みの種類と優先順位（ビット番号が小さいほど高優先）を定義します。
class Interrupt(Enum):
    VBLANK = 0
    LCD_STAT = 1
    TIMER = 2
    SERIAL = 3
    JOYPAD = 4

    @property
    def index(self) -> int:
        return self.value

    @property
    def mask(self) -> int:
        return 1 << self.value


def _flag_property(flag: Flag) -> property:
    def getter(self) -> bool:
        return self.registers.test_bit(Reg.F, flag)

    def setter(self, value: bool) -> None:
        self.registers.set_bit(Reg.F, flag, value)

    return property(getter, setter)


def _reg_property(reg: Reg) -> property:
    def getter(self) -> int:
        return self.registers.get(reg)

    def setter(self, value: int) -> None:
        self.registers.set(reg, value)

    return property(getter, setter)


# @intent:responsibility SM83 CPUのレジスタ、フラグ、割り込みラッチの状態を保持します。
@dataclass
class Sm83CpuState(CpuState):
    """
    SM83 CPUの状態を保持するデータクラス。
    8ビットレジスタはRegisterFileに格納し、a, b, ... のプロパティから参照します。
    """
    registers: RegisterFile = field(default_factory=lambda: RegisterFile(Reg))
    ime: bool = False   # Interrupt Master Enable
    ie: int = 0x00      # Interrupt Enable
    if_: int = 0x00     # Interrupt Flag (request)

    a = _reg_property(Reg.A)
    b = _reg_property(Reg.B)
    c = _reg_property(Reg.C)
    d = _reg_property(Reg.D)
    e = _reg_property(Reg.E)
    h = _reg_property(Reg.H)
    l = _reg_property(Reg.L)

    flag_z = _flag_property(Flag.Z)
    flag_n = _flag_property(Flag.N)
    flag_h = _flag_property(Flag.H)
    flag_c = _flag_property(Flag.C)

    # @intent:accessor Fレジスタは書き込み時に下位ニブルを落とします。
    @property
    def f(self) -> int:
        return self.registers.get(Reg.F)

    @f.setter
    def f(self, value: int) -> None:
        self.registers.set(Reg.F, check_bits8(value) & F_MASK)

    # @intent:responsibility 16ビットのレジスタペアを読み出します。
    def get16(self, pair: Reg16) -> int:
        return (self.registers.get(pair.high) << 8) | self.registers.get(pair.low)

    # @intent:responsibility 16ビットのレジスタペアを設定します。AFの下位ニブルは0に保たれます。
    def set16(self, pair: Reg16, value: int) -> None:
        check_bits16(value)
        low = value & 0xFF
        if pair is Reg16.AF:
            low &= F_MASK
        self.registers.set(pair.high, value >> 8)
        self.registers.set(pair.low, low)

    @property
    def af(self) -> int:
        return self.get16(Reg16.AF)

    @af.setter
    def af(self, value: int) -> None:
        self.set16(Reg16.AF, value)

    @property
    def bc(self) -> int:
        return self.get16(Reg16.BC)

    @bc.setter
    def bc(self, value: int) -> None:
        self.set16(Reg16.BC, value)

    @property
    def de(self) -> int:
        return self.get16(Reg16.DE)

    @de.setter
    def de(self, value: int) -> None:
        self.set16(Reg16.DE, value)

    @property
    def hl(self) -> int:
        return self.get16(Reg16.HL)

    @hl.setter
    def hl(self, value: int) -> None:
        self.set16(Reg16.HL, value)

    # @intent:responsibility 許可されていて、かつ要求されている割り込みのビット集合を返します。
    def pending_interrupts(self) -> int:
        return self.ie & self.if_ & INTERRUPT_MASK
