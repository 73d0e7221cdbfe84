from dataclasses import dataclass, field, fields
from typing import Dict, Optional, Tuple


# @intent:responsibility グローバルなアドレスマップを設定値として保持します。
# @intent:rationale コアがリテラルを直接持たず、周辺機器の追加・削除でコアを触らずに済むようにします。
@dataclass(frozen=True)
class AddressMap:
    rom_start: int = 0x0000
    rom_end: int = 0x8000
    work_ram_start: int = 0xC000
    work_ram_end: int = 0xE000
    echo_ram_start: int = 0xE000
    echo_ram_end: int = 0xFE00
    regs_start: int = 0xFF00
    reg_p1: int = 0xFF00
    reg_div: int = 0xFF04
    reg_tima: int = 0xFF05
    reg_tma: int = 0xFF06
    reg_tac: int = 0xFF07
    reg_if: int = 0xFF0F
    reg_boot_rom_disable: int = 0xFF50
    high_ram_start: int = 0xFF80
    high_ram_end: int = 0xFFFF
    reg_ie: int = 0xFFFF
    # VBLANK, LCD_STAT, TIMER, SERIAL, JOYPAD
    interrupt_vectors: Tuple[int, ...] = (0x40, 0x48, 0x50, 0x58, 0x60)
    # RST 0..7
    restart_vectors: Tuple[int, ...] = (0x00, 0x08, 0x10, 0x18, 0x20, 0x28, 0x30, 0x38)

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            values = value if isinstance(value, tuple) else (value,)
            for v in values:
                if not isinstance(v, int) or not 0 <= v <= 0x10000:
                    raise ValueError(f"Address map entry '{f.name}' has invalid value {v!r}.")
        if len(self.interrupt_vectors) != 5:
            raise ValueError("interrupt_vectors must hold exactly 5 addresses.")
        if len(self.restart_vectors) != 8:
            raise ValueError("restart_vectors must hold exactly 8 addresses.")

    @property
    def high_ram_size(self) -> int:
        return self.high_ram_end - self.high_ram_start

    @property
    def work_ram_size(self) -> int:
        return self.work_ram_end - self.work_ram_start


@dataclass
class CpuInitialState:
    pc: int = 0x0000
    sp: int = 0x0000
    registers: Dict[str, int] = field(default_factory=dict)


@dataclass
class SystemConfig:
    cartridge: str
    boot_rom: Optional[str] = None
    address_map: AddressMap = field(default_factory=AddressMap)
    initial_state: CpuInitialState = field(default_factory=CpuInitialState)
