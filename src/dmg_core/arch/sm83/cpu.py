# dmg_core/arch/sm83/cpu.py
"""
SM83 CPUエミュレーションの中心モジュール。

このモジュールはSM83 CPUの具体的な実装を提供し、
AbstractCpuのスケジューリングに命令の実行と割り込みの調停を組み込みます。
CPU自身もバス上のコンポーネントとして、ハイRAMと割り込みレジスタ(IE/IF)を公開します。
"""
from typing import Optional

from dmg_core.common import bits
from dmg_core.core.cpu import AbstractCpu
from dmg_core.config.models import AddressMap
from dmg_core.transport.bus import NO_DATA
from dmg_core.transport.memory import Ram
from dmg_core.arch.sm83.opcodes import decode
from dmg_core.arch.sm83.state import Interrupt, Sm83CpuState
from dmg_core.arch.sm83.instructions import execute_instruction
from dmg_core.arch.sm83.instructions.base import ExecutionContext, push16

# @intent:constant 割り込みを受け付けてベクタへ分岐するまでのコスト（マシンサイクル）。
INTERRUPT_CYCLES = 5


# @intent:responsibility SM83 CPUの具体的なエミュレーションロジックを提供します。
class Sm83Cpu(AbstractCpu):
    """
    SM83 CPUをエミュレートするクラス。
    AbstractCpuを継承し、SM83固有の動作を実装します。
    """
    # @intent:responsibility Sm83Cpuの初期化を行います。
    # @intent:pre-condition `address_map`のハイRAM範囲とIE/IFのアドレスは互いに重ならない必要があります。
    def __init__(self, address_map: AddressMap = AddressMap()):
        self._address_map = address_map
        self._high_ram = Ram(address_map.high_ram_size)
        super().__init__()

    def _create_initial_state(self) -> Sm83CpuState:
        return Sm83CpuState()

    def get_state(self) -> Sm83CpuState:
        return self._state

    @property
    def address_map(self) -> AddressMap:
        return self._address_map

    # @intent:responsibility レジスタに加えてハイRAMもゼロクリアします。
    def reset(self) -> None:
        super().reset()
        self._high_ram = Ram(self._address_map.high_ram_size)

    # --- Component ---

    def _high_ram_offset(self, address: int) -> Optional[int]:
        amap = self._address_map
        if amap.high_ram_start <= address < amap.high_ram_end:
            return address - amap.high_ram_start
        return None

    # @intent:responsibility ハイRAMとIE/IFレジスタの読み出しに応答します。
    def read(self, address: int) -> int:
        bits.check_bits16(address)
        offset = self._high_ram_offset(address)
        if offset is not None:
            return self._high_ram.read(offset)
        if address == self._address_map.reg_if:
            return self._state.if_
        if address == self._address_map.reg_ie:
            return self._state.ie
        return NO_DATA

    def write(self, address: int, data: int) -> None:
        bits.check_bits16(address)
        bits.check_bits8(data)
        offset = self._high_ram_offset(address)
        if offset is not None:
            self._high_ram.write(offset, data)
        elif address == self._address_map.reg_if:
            self._state.if_ = data
        elif address == self._address_map.reg_ie:
            self._state.ie = data

    # --- Interrupts ---

    # @intent:responsibility 周辺機器からの割り込み要求をIFに記録します。同じ要求を重ねても冪等です。
    def request_interrupt(self, interrupt: Interrupt) -> None:
        self._state.if_ |= interrupt.mask

    def _has_wake_request(self) -> bool:
        return self._state.pending_interrupts() != 0

    # @intent:responsibility IMEが有効なら最優先（最小ビット番号）の割り込みを受け付けます。
    # @intent:post-condition IMEとIFの該当ビットがクリアされ、PCが割り込みベクタを指します。
    def _service_interrupt(self) -> Optional[int]:
        state = self._state
        pending = state.pending_interrupts()
        if not state.ime or pending == 0:
            return None

        index = (pending & -pending).bit_length() - 1
        state.ime = False
        state.if_ = bits.set_bit(state.if_, index, False)
        push16(state, self.bus, state.pc)
        state.pc = self._address_map.interrupt_vectors[index]
        return INTERRUPT_CYCLES

    # --- Dispatch ---

    # @intent:responsibility PCの命令をデコードして実行し、PCを次の命令（または分岐先）に更新します。
    def _step(self) -> Optional[int]:
        state = self._state
        opcode = decode(self.bus, state.pc)
        ctx = ExecutionContext(
            bus=self.bus,
            address_map=self._address_map,
            opcode=opcode,
            pc=state.pc,
            next_pc=(state.pc + opcode.total_bytes) & 0xFFFF,
        )
        execute_instruction(state, ctx)
        state.pc = ctx.next_pc

        if ctx.halted:
            return None
        return opcode.cycles + (opcode.additional_cycles if ctx.branch_taken else 0)
