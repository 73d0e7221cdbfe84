# dmg_core/system.py
"""
システム全体の組み立てと駆動ループ。

GameBoyはバス、メモリ、周辺機器、CPUを接続し、
グローバルなクロックティックを進めながら各コンポーネントを固定順で駆動します。
"""
import logging
from typing import Optional

from dmg_core.config.models import AddressMap
from dmg_core.transport.bus import Bus, Component
from dmg_core.transport.memory import BootRomController, Ram, RamController
from dmg_core.arch.sm83.cpu import Sm83Cpu
from dmg_core.peripherals.joypad import Joypad
from dmg_core.peripherals.timer import Timer

logger = logging.getLogger(__name__)

# @intent:constant 元のハードウェアのクロック周波数（ティック/秒）。
CLOCK_FREQ = 2 ** 22

# @intent:constant 1マシンサイクルあたりのティック数。
TICKS_PER_CYCLE = 4


# @intent:responsibility 全コンポーネントを所有し、クロックティックに従って駆動します。
class GameBoy:
    """
    コンソール全体を表すクラス。
    読み込みの優先順位は接続順で、ワークRAM、エコーRAM、ブートROM（またはカートリッジ）、
    タイマー、ジョイパッド、CPUの順です。
    """
    def __init__(self, cartridge: Component, boot_rom: Optional[bytes] = None,
                 address_map: AddressMap = AddressMap()):
        if cartridge is None:
            raise TypeError("GameBoy requires a cartridge.")
        self._cartridge = cartridge
        self._address_map = address_map
        self._bus = Bus()
        self._cpu = Sm83Cpu(address_map)
        self._timer = Timer(self._cpu, address_map)
        self._joypad = Joypad(self._cpu, address_map)
        self._tick = 0
        self._cycle = 0

        work_ram = Ram(address_map.work_ram_size)
        self._bus.attach(RamController(work_ram, address_map.work_ram_start, address_map.work_ram_end))
        self._bus.attach(RamController(work_ram, address_map.echo_ram_start, address_map.echo_ram_end))

        if boot_rom is not None:
            self._boot_rom_controller: Optional[BootRomController] = BootRomController(
                cartridge, boot_rom, address_map.reg_boot_rom_disable)
            self._bus.attach(self._boot_rom_controller)
        else:
            self._boot_rom_controller = None
            self._bus.attach(cartridge)

        self._timer.attach_to(self._bus)
        self._joypad.attach_to(self._bus)
        self._cpu.attach_to(self._bus)
        logger.debug("GameBoy assembled with %d bus components (boot ROM: %s)",
                     len(self._bus.components()), boot_rom is not None)

    @property
    def bus(self) -> Bus:
        return self._bus

    @property
    def cpu(self) -> Sm83Cpu:
        return self._cpu

    @property
    def timer(self) -> Timer:
        return self._timer

    @property
    def joypad(self) -> Joypad:
        return self._joypad

    @property
    def cartridge(self) -> Component:
        return self._cartridge

    @property
    def boot_rom_controller(self) -> Optional[BootRomController]:
        return self._boot_rom_controller

    @property
    def ticks(self) -> int:
        return self._tick

    @property
    def cycles(self) -> int:
        return self._cycle

    # @intent:responsibility 指定されたティックの直前までシミュレーションを進めます。
    # @intent:pre-condition tickは現在のティック以上である必要があります。
    def run_until(self, tick: int) -> None:
        """
        4ティックごとに、タイマー、CPUの順でマシンサイクル番号を渡して駆動します。
        """
        if tick < self._tick:
            raise ValueError(f"Cannot run backwards: current tick is {self._tick}, requested {tick}.")
        while self._tick < tick:
            if self._tick % TICKS_PER_CYCLE == 0:
                self._timer.cycle(self._cycle)
                self._cpu.cycle(self._cycle)
                self._cycle += 1
            self._tick += 1
