# dmg_core/peripherals/joypad.py
"""
ジョイパッド周辺機器 (P1レジスタ)。

8つのキーは方向キー（ライン1）とボタン（ライン2）の2本のラインに分かれ、
P1のビット4/5（0で選択）で読み出すラインを選びます。押されたキーは0として読めます。
"""
from enum import Enum

from dmg_core.common import bits
from dmg_core.config.models import AddressMap
from dmg_core.transport.bus import Component, NO_DATA
from dmg_core.arch.sm83.state import Interrupt


class Key(Enum):
    RIGHT = 0
    LEFT = 1
    UP = 2
    DOWN = 3
    A = 4
    B = 5
    SELECT = 6
    START = 7

    # @intent:accessor キーが属するライン（0: 方向キー, 1: ボタン）を返します。
    @property
    def line(self) -> int:
        return self.value // 4

    @property
    def bit(self) -> int:
        return self.value % 4


# @intent:responsibility キーの押下状態を保持し、P1レジスタとして公開します。
class Joypad(Component):
    def __init__(self, cpu, address_map: AddressMap = AddressMap()):
        if cpu is None:
            raise TypeError("Joypad requires a CPU.")
        self._cpu = cpu
        self._address_map = address_map
        # 各ラインの下位4ビット。1が「離されている」状態です。
        self._lines = [0xF, 0xF]
        self._p1 = 0xFF

    def read(self, address: int) -> int:
        bits.check_bits16(address)
        if address == self._address_map.reg_p1:
            return self._p1
        return NO_DATA

    # @intent:responsibility ライン選択を書き込み、選択されたラインのキー状態をP1に反映します。
    def write(self, address: int, data: int) -> None:
        bits.check_bits16(address)
        bits.check_bits8(data)
        if address != self._address_map.reg_p1:
            return
        selection = bits.extract(data, 4, 2)
        if selection == 0b11:
            self._p1 = 0xFF
            return
        p1 = 0xC0 | (selection << 4)
        if not bits.test(selection, 0):
            p1 |= self._lines[0]
        if not bits.test(selection, 1):
            p1 |= self._lines[1]
        self._p1 = p1

    # @intent:responsibility キーを押します。離されていたキーであればJOYPAD割り込みを要求します。
    def key_pressed(self, key: Key) -> None:
        line = self._lines[key.line]
        if bits.test(line, key.bit):
            self._cpu.request_interrupt(Interrupt.JOYPAD)
        self._lines[key.line] = bits.set_bit(line, key.bit, False)

    def key_released(self, key: Key) -> None:
        self._lines[key.line] = bits.set_bit(self._lines[key.line], key.bit, True)
