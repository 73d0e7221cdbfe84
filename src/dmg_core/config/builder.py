import logging
from pathlib import Path

from dmg_core.arch.sm83.cpu import Sm83Cpu
from dmg_core.common import bits
from dmg_core.peripherals.cartridge import Cartridge
from dmg_core.system import GameBoy
from .models import SystemConfig, CpuInitialState

logger = logging.getLogger(__name__)

# 初期状態で設定できるレジスタ名
SETTABLE_REGISTERS = ("a", "f", "b", "c", "d", "e", "h", "l", "af", "bc", "de", "hl")


# @intent:responsibility システム構成（Config）に基づいて、カートリッジ、周辺機器、CPUを生成・接続し、初期状態を適用します。
class SystemBuilder:
    def build_system(self, config: SystemConfig) -> GameBoy:
        cartridge = Cartridge.from_file(config.cartridge, config.address_map)

        boot_rom = None
        if config.boot_rom:
            logger.info("Loading boot ROM from %s", config.boot_rom)
            boot_rom = Path(config.boot_rom).read_bytes()

        gameboy = GameBoy(cartridge, boot_rom=boot_rom, address_map=config.address_map)

        # ブートROMがある場合は、ブートROM自身がレジスタを初期化する
        if boot_rom is None:
            self.apply_initial_state(gameboy.cpu, config.initial_state)

        return gameboy

    # @intent:responsibility Configで定義された初期状態をCPUに適用します。
    def apply_initial_state(self, cpu: Sm83Cpu, config_state: CpuInitialState) -> None:
        """
        CPUをリセットし、Configから指定された初期値を適用します。
        """
        cpu.reset()
        state = cpu.get_state()
        state.pc = bits.check_bits16(config_state.pc)
        state.sp = bits.check_bits16(config_state.sp)
        for reg_name, value in config_state.registers.items():
            if reg_name not in SETTABLE_REGISTERS:
                logger.warning("Ignoring unknown register '%s' in initial state", reg_name)
                continue
            setattr(state, reg_name, value)
