# dmg_core/peripherals/cartridge.py
"""
カートリッジとメモリバンクコントローラ (MBC)。

ROMイメージのヘッダから種類とRAMサイズを読み取り、
対応するMBCを生成してバスに公開します。
"""
import logging
from pathlib import Path
from typing import Union

from dmg_core.common import bits
from dmg_core.config.models import AddressMap
from dmg_core.transport.bus import Component, NO_DATA
from dmg_core.transport.memory import Ram, Rom

logger = logging.getLogger(__name__)

# @intent:constant ヘッダ内のカートリッジ種別とRAMサイズのオフセット。
CARTRIDGE_TYPE_ADDRESS = 0x147
RAM_SIZE_ADDRESS = 0x149

# @intent:constant ヘッダのRAMサイズコード(0-3)に対応するバイト数。
RAM_SIZES = (0, 2048, 8192, 32768)

MBC0_ROM_SIZE = 0x8000
MBC1_TYPES = (0x01, 0x02, 0x03)


# @intent:responsibility バンク切り替えを持たない32KiBのROMをそのまま公開します。
class MBC0(Component):
    def __init__(self, rom: Rom, address_map: AddressMap = AddressMap()):
        if rom is None:
            raise TypeError("MBC0 requires a ROM.")
        if rom.size() != MBC0_ROM_SIZE:
            raise ValueError(f"MBC0 ROM must be exactly {MBC0_ROM_SIZE:#x} bytes, got {rom.size():#x}.")
        self._rom = rom
        self._address_map = address_map

    def read(self, address: int) -> int:
        bits.check_bits16(address)
        start = self._address_map.rom_start
        if start <= address < self._address_map.rom_end:
            return self._rom.read(address - start)
        return NO_DATA

    def write(self, address: int, data: int) -> None:
        pass


# @intent:responsibility MBC1のバンク切り替えレジスタとバンク化されたRAMを実装します。
class MBC1(Component):
    """
    MBC1コントローラ。
    アドレスの上位3ビット（8KiB単位のブロック）で、ROMバンク、制御レジスタ、
    外部RAMのいずれへのアクセスかを判別します。
    ハードウェアと同じくアドレスビットで直接判別するため、AddressMapの設定は影響しません。

    - 0x0000-0x1FFF への書き込み: 下位4ビットが0xAならRAMを有効化
    - 0x2000-0x3FFF への書き込み: ROMバンク番号の下位5ビット（0は1として扱う）
    - 0x4000-0x5FFF への書き込み: ROMバンク上位2ビット、またはRAMバンク番号
    - 0x6000-0x7FFF への書き込み: バンキングモードの選択
    """
    RAM_ENABLE = 0xA

    def __init__(self, rom: Rom, ram_size: int):
        if rom is None:
            raise TypeError("MBC1 requires a ROM.")
        self._rom = rom
        self._ram = Ram(ram_size)
        self._ram_enabled = False
        self._mode = 0
        self._rom_lsb5 = 1
        self._ram_rom2 = 0
        self._rom_mask = rom.size() - 1
        self._ram_mask = ram_size - 1

    def read(self, address: int) -> int:
        block = bits.extract(bits.check_bits16(address), 13, 3)
        if block in (0, 1):
            return self._rom.read(self._rom_address(self._msb2(), 0, address))
        if block in (2, 3):
            return self._rom.read(self._rom_address(self._ram_rom2, self._rom_lsb5, address))
        if block == 5:
            if not self._ram_enabled or self._ram.size() == 0:
                return 0xFF
            return self._ram.read(self._ram_address(address))
        return NO_DATA

    def write(self, address: int, data: int) -> None:
        bits.check_bits8(data)
        block = bits.extract(bits.check_bits16(address), 13, 3)
        if block == 0:
            self._ram_enabled = bits.clip(4, data) == self.RAM_ENABLE
        elif block == 1:
            self._rom_lsb5 = max(1, bits.clip(5, data))
        elif block == 2:
            self._ram_rom2 = bits.clip(2, data)
        elif block == 3:
            self._mode = 1 if bits.test(data, 0) else 0
        elif block == 5 and self._ram_enabled and self._ram.size() > 0:
            self._ram.write(self._ram_address(address), data)

    # @intent:utility_function モード1では0x4000-0x7FFF以外の領域にも上位2ビットのバンク番号が効きます。
    def _msb2(self) -> int:
        return self._ram_rom2 if self._mode == 1 else 0

    def _rom_address(self, b_20_19: int, b_18_14: int, b_13_0: int) -> int:
        return ((b_20_19 << 19) | (b_18_14 << 14) | bits.clip(14, b_13_0)) & self._rom_mask

    def _ram_address(self, b_12_0: int) -> int:
        return ((self._msb2() << 13) | bits.clip(13, b_12_0)) & self._ram_mask


# @intent:responsibility ROMイメージのヘッダに応じたMBCを選び、バス上のカートリッジとして振る舞います。
class Cartridge(Component):
    def __init__(self, mbc: Component):
        if mbc is None:
            raise TypeError("Cartridge requires a memory bank controller.")
        self._mbc = mbc

    @property
    def mbc(self) -> Component:
        return self._mbc

    # @intent:responsibility ROMイメージのバイト列からカートリッジを生成します。
    # @intent:pre-condition ヘッダの種別は0x00 (MBC0) または0x01-0x03 (MBC1) である必要があります。
    @classmethod
    def from_bytes(cls, data: bytes, address_map: AddressMap = AddressMap()) -> "Cartridge":
        if len(data) <= RAM_SIZE_ADDRESS:
            raise ValueError(f"ROM image of {len(data)} bytes is too small to hold a cartridge header.")
        rom = Rom(data)
        cartridge_type = data[CARTRIDGE_TYPE_ADDRESS]
        if cartridge_type == 0x00:
            logger.debug("Cartridge type 0x00: MBC0, %d bytes of ROM", rom.size())
            return cls(MBC0(rom, address_map))
        if cartridge_type in MBC1_TYPES:
            ram_code = data[RAM_SIZE_ADDRESS]
            if ram_code >= len(RAM_SIZES):
                raise ValueError(f"Unsupported RAM size code {ram_code:#04x}.")
            logger.debug("Cartridge type %#04x: MBC1, %d bytes of ROM, %d bytes of RAM",
                         cartridge_type, rom.size(), RAM_SIZES[ram_code])
            return cls(MBC1(rom, RAM_SIZES[ram_code]))
        raise ValueError(f"Unsupported cartridge type {cartridge_type:#04x}.")

    @classmethod
    def from_file(cls, path: Union[str, Path], address_map: AddressMap = AddressMap()) -> "Cartridge":
        path = Path(path)
        logger.info("Loading cartridge from %s", path)
        return cls.from_bytes(path.read_bytes(), address_map)

    def read(self, address: int) -> int:
        bits.check_bits16(address)
        return self._mbc.read(address)

    def write(self, address: int, data: int) -> None:
        self._mbc.write(bits.check_bits16(address), bits.check_bits8(data))
