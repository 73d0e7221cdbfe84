# dmg_core/transport/memory.py
"""
メモリ記憶域とバスコントローラ。

Ram/Romは単なるバイト列の記憶域であり、バスには直接接続しません。
バスとの仲介はRamController、BootRomControllerが担います。
"""
from typing import Optional

from dmg_core.common.bits import check_bits8, check_bits16
from dmg_core.transport.bus import Component, NO_DATA


# @intent:responsibility 読み書き可能なバイト記憶域を提供します。
class Ram:
    """
    固定サイズのRAM。インデックスはRAM内のオフセットです。
    """
    # @intent:pre-condition sizeは0以上の整数である必要があります。
    def __init__(self, size: int):
        if not isinstance(size, int) or size < 0:
            raise ValueError("RAM size must be a non-negative integer.")
        self._memory = bytearray(size)

    def size(self) -> int:
        return len(self._memory)

    def read(self, index: int) -> int:
        if not 0 <= index < len(self._memory):
            raise IndexError(f"Index {index} out of bounds for RAM of size {len(self._memory)}.")
        return self._memory[index]

    def write(self, index: int, value: int) -> None:
        if not 0 <= index < len(self._memory):
            raise IndexError(f"Index {index} out of bounds for RAM of size {len(self._memory)}.")
        self._memory[index] = check_bits8(value)


# @intent:responsibility 読み込み専用のバイト記憶域を提供します。
class Rom:
    """
    読み込み専用メモリ。生成時に渡されたデータのコピーを保持します。
    """
    def __init__(self, data: bytes):
        if len(data) == 0:
            raise ValueError("ROM data must not be empty.")
        self._data = bytes(data)

    def size(self) -> int:
        return len(self._data)

    def read(self, index: int) -> int:
        if not 0 <= index < len(self._data):
            raise IndexError(f"Index {index} out of bounds for ROM of size {len(self._data)}.")
        return self._data[index]


# @intent:responsibility Ramをバス上の[start, end)の範囲に公開します。
class RamController(Component):
    """
    Ramをバスに接続するコントローラ。
    同じRamを複数のコントローラで共有することで、エコー領域を表現できます。
    """
    # @intent:pre-condition 範囲の長さはRamのサイズ以下である必要があります。
    def __init__(self, ram: Ram, start: int, end: Optional[int] = None):
        if ram is None:
            raise TypeError("RamController requires a Ram.")
        if end is None:
            end = start + ram.size()
        check_bits16(start)
        if not 0 <= end <= 0x10000:
            raise ValueError(f"End address {end!r} out of range.")
        if not 0 <= end - start <= ram.size():
            raise ValueError(
                f"Range [{start:#06x}, {end:#06x}) does not fit in a RAM of size {ram.size()}."
            )
        self._ram = ram
        self._start = start
        self._end = end

    def read(self, address: int) -> int:
        check_bits16(address)
        if self._start <= address < self._end:
            return self._ram.read(address - self._start)
        return NO_DATA

    def write(self, address: int, data: int) -> None:
        check_bits16(address)
        check_bits8(data)
        if self._start <= address < self._end:
            self._ram.write(address - self._start, data)


# @intent:responsibility 起動時にブートROMをカートリッジの先頭256バイトに重ねて見せます。
class BootRomController(Component):
    """
    ブートROMが有効な間は0x0000-0x00FFをブートROMとして応答し、
    無効化レジスタへの書き込みで恒久的にカートリッジへ切り替わります。
    """
    BOOT_ROM_SIZE = 0x100

    def __init__(self, cartridge: Component, boot_rom: bytes, disable_register: int = 0xFF50):
        if cartridge is None:
            raise TypeError("BootRomController requires a cartridge.")
        if len(boot_rom) != self.BOOT_ROM_SIZE:
            raise ValueError(f"Boot ROM must be exactly {self.BOOT_ROM_SIZE} bytes, got {len(boot_rom)}.")
        self._cartridge = cartridge
        self._boot_rom = Rom(boot_rom)
        self._disable_register = check_bits16(disable_register)
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def read(self, address: int) -> int:
        check_bits16(address)
        if self._active and address < self.BOOT_ROM_SIZE:
            return self._boot_rom.read(address)
        return self._cartridge.read(address)

    def write(self, address: int, data: int) -> None:
        check_bits16(address)
        check_bits8(data)
        if address == self._disable_register:
            self._active = False
        else:
            self._cartridge.write(address, data)
