# tests/peripherals/test_cartridge.py
"""
dmg_core.peripherals.cartridgeモジュールの単体テスト。
"""
import pytest
from dmg_core.peripherals.cartridge import Cartridge, MBC0, MBC1
from dmg_core.transport.bus import NO_DATA
from dmg_core.transport.memory import Rom

# @intent:test_suite ヘッダによるMBCの選択と、MBC0/MBC1のバンク切り替えを検証します。


def _banked_rom(banks: int) -> bytearray:
    """各16KiBバンクの先頭バイトにバンク番号を書いたROMイメージを生成します。"""
    data = bytearray(banks * 0x4000)
    for bank in range(banks):
        data[bank * 0x4000] = bank
    return data


class TestMBC0:
    def test_reads_rom(self):
        data = bytearray(0x8000)
        data[0x1234] = 0x56
        mbc = MBC0(Rom(data))
        assert mbc.read(0x1234) == 0x56
        assert mbc.read(0x8000) == NO_DATA
        mbc.write(0x1234, 0x00)
        assert mbc.read(0x1234) == 0x56

    def test_requires_32k(self):
        with pytest.raises(ValueError, match="MBC0 ROM must be exactly"):
            MBC0(Rom(bytes(0x4000)))


class TestMBC1:
    # @intent:test_case_bank ROMバンク番号の書き込みで0x4000-0x7FFFの内容が切り替わることを検証します。
    def test_rom_banking(self):
        mbc = MBC1(Rom(_banked_rom(8)), 0)
        assert mbc.read(0x0000) == 0
        assert mbc.read(0x4000) == 1
        mbc.write(0x2000, 0x05)
        assert mbc.read(0x4000) == 5
        mbc.write(0x2000, 0x00)  # 0は1として扱う
        assert mbc.read(0x4000) == 1

    def test_upper_bits_mode1(self):
        mbc = MBC1(Rom(_banked_rom(64)), 0)
        mbc.write(0x4000, 0x01)
        mbc.write(0x2000, 0x02)
        assert mbc.read(0x4000) == 0x22
        assert mbc.read(0x0000) == 0
        mbc.write(0x6000, 0x01)
        assert mbc.read(0x0000) == 0x20

    # @intent:test_case_ram 外部RAMは有効化されるまで0xFFを返し、書き込みも無視されることを検証します。
    def test_ram_enable(self):
        mbc = MBC1(Rom(_banked_rom(2)), 8192)
        mbc.write(0xA000, 0x12)
        assert mbc.read(0xA000) == 0xFF
        mbc.write(0x0000, 0x0A)
        mbc.write(0xA000, 0x12)
        assert mbc.read(0xA000) == 0x12
        mbc.write(0x0000, 0x00)
        assert mbc.read(0xA000) == 0xFF

    def test_no_ram(self):
        mbc = MBC1(Rom(_banked_rom(2)), 0)
        mbc.write(0x0000, 0x0A)
        mbc.write(0xA000, 0x12)
        assert mbc.read(0xA000) == 0xFF

    def test_unmapped(self):
        mbc = MBC1(Rom(_banked_rom(2)), 0)
        assert mbc.read(0xC000) == NO_DATA
        assert mbc.read(0x8000) == NO_DATA


class TestCartridge:
    def _image(self, cartridge_type: int, ram_code: int = 0, size: int = 0x8000) -> bytearray:
        data = bytearray(size)
        data[0x147] = cartridge_type
        data[0x149] = ram_code
        return data

    def test_from_bytes_mbc0(self):
        cartridge = Cartridge.from_bytes(self._image(0x00))
        assert isinstance(cartridge.mbc, MBC0)
        assert cartridge.read(0x0147) == 0x00

    def test_from_bytes_mbc1(self):
        cartridge = Cartridge.from_bytes(self._image(0x03, ram_code=2, size=0x10000))
        assert isinstance(cartridge.mbc, MBC1)
        cartridge.write(0x0000, 0x0A)
        cartridge.write(0xBFFF, 0x77)
        assert cartridge.read(0xBFFF) == 0x77

    @pytest.mark.parametrize("cartridge_type", [0x05, 0x13, 0xFF])
    def test_unsupported_type(self, cartridge_type):
        with pytest.raises(ValueError, match="Unsupported cartridge type"):
            Cartridge.from_bytes(self._image(cartridge_type))

    def test_unsupported_ram_code(self):
        with pytest.raises(ValueError, match="Unsupported RAM size code"):
            Cartridge.from_bytes(self._image(0x01, ram_code=4))

    def test_too_small(self):
        with pytest.raises(ValueError, match="too small"):
            Cartridge.from_bytes(bytes(0x100))

    def test_from_file(self, tmp_path):
        rom_file = tmp_path / "game.gb"
        rom_file.write_bytes(bytes(self._image(0x00)))
        cartridge = Cartridge.from_file(rom_file)
        assert isinstance(cartridge.mbc, MBC0)

    def test_validation(self):
        cartridge = Cartridge.from_bytes(self._image(0x00))
        with pytest.raises(ValueError):
            cartridge.read(0x10000)
        with pytest.raises(ValueError):
            cartridge.write(0x0000, 0x100)
