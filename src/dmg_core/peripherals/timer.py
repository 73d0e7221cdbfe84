# dmg_core/peripherals/timer.py
"""
タイマー周辺機器 (DIV / TIMA / TMA / TAC)。

DIVは16ビットの内部カウンタで、マシンサイクルごとに4ずつ増えます（バス上には上位8ビットが見えます）。
TIMAは「TACのビット2 AND DIVの選択ビット」が1から0に変化したときに1だけ増え、
オーバーフローするとTMAを再ロードしてTIMER割り込みを要求します。
"""
from typing import Optional

from dmg_core.common import bits
from dmg_core.config.models import AddressMap
from dmg_core.transport.bus import Clocked, Component, NO_DATA
from dmg_core.arch.sm83.state import Interrupt

# @intent:constant TACの下位2ビットで選ばれる、DIV内部カウンタのビット番号。
DIV_BIT_FOR_TAC = (9, 3, 5, 7)


# @intent:responsibility DIVとTIMAのカウントを管理し、TIMAのオーバーフローでTIMER割り込みを要求します。
class Timer(Component, Clocked):
    def __init__(self, cpu, address_map: AddressMap = AddressMap()):
        if cpu is None:
            raise TypeError("Timer requires a CPU.")
        self._cpu = cpu
        self._address_map = address_map
        self._div = 0
        self._tima = 0
        self._tma = 0
        self._tac = 0

    def cycle(self, cycle: int) -> None:
        self._update(div=bits.clip(16, self._div + 4))

    def read(self, address: int) -> int:
        bits.check_bits16(address)
        amap = self._address_map
        if address == amap.reg_div:
            return bits.extract(self._div, 8, 8)
        if address == amap.reg_tima:
            return self._tima
        if address == amap.reg_tma:
            return self._tma
        if address == amap.reg_tac:
            return self._tac
        return NO_DATA

    # @intent:responsibility DIVへの書き込みは値に関わらずカウンタを0に戻します。
    def write(self, address: int, data: int) -> None:
        bits.check_bits16(address)
        bits.check_bits8(data)
        amap = self._address_map
        if address == amap.reg_div:
            self._update(div=0)
        elif address == amap.reg_tima:
            self._tima = data
        elif address == amap.reg_tma:
            self._tma = data
        elif address == amap.reg_tac:
            self._update(tac=data)

    def _state(self) -> bool:
        return bits.test(self._tac, 2) and bits.test(self._div, DIV_BIT_FOR_TAC[bits.clip(2, self._tac)])

    # @intent:responsibility DIVまたはTACを更新し、状態の立ち下がりでTIMAを進めます。
    def _update(self, div: Optional[int] = None, tac: Optional[int] = None) -> None:
        before = self._state()
        if div is not None:
            self._div = div
        if tac is not None:
            self._tac = tac
        if before and not self._state():
            self._increment_tima()

    def _increment_tima(self) -> None:
        if self._tima == 0xFF:
            self._cpu.request_interrupt(Interrupt.TIMER)
            self._tima = self._tma
        else:
            self._tima += 1
