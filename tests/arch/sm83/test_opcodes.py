# tests/arch/sm83/test_opcodes.py
import pytest
from dmg_core.common.exceptions import DecodeError
from dmg_core.arch.sm83.opcodes import (
    ALL_OPCODES, DIRECT_OPCODE_TABLE, Family, Kind, OPCODES_BY_NAME, Opcode,
    PREFIXED_OPCODE_TABLE, build_opcode_table, decode,
)
from dmg_core.transport.bus import Bus
from dmg_core.transport.memory import Ram, RamController

ILLEGAL_DIRECT = {0xD3, 0xDB, 0xDD, 0xE3, 0xE4, 0xEB, 0xEC, 0xED, 0xF4, 0xFC, 0xFD}


class TestOpcodeTables:
    # @intent:test_case_completeness 0xCBと11個の未定義スロット以外の全ての直接命令が登録されていることを検証します。
    def test_direct_table_completeness(self):
        for encoding, opcode in enumerate(DIRECT_OPCODE_TABLE):
            if encoding in ILLEGAL_DIRECT or encoding == 0xCB:
                assert opcode is None
            else:
                assert opcode is not None, f"{encoding:#04x} is unmapped"
                assert opcode.encoding == encoding
                assert opcode.kind is Kind.DIRECT

    def test_prefixed_table_completeness(self):
        assert all(op is not None and op.kind is Kind.PREFIXED for op in PREFIXED_OPCODE_TABLE)
        assert all(op.total_bytes == 2 for op in PREFIXED_OPCODE_TABLE)

    def test_names_are_unique(self):
        assert len(OPCODES_BY_NAME) == len(ALL_OPCODES)

    @pytest.mark.parametrize("name, encoding, length, cycles, extra", [
        ("NOP", 0x00, 1, 1, 0),
        ("LD_BC_N16", 0x01, 3, 3, 0),
        ("LD_N16R_SP", 0x08, 3, 5, 0),
        ("JR_NZ_E8", 0x20, 2, 2, 1),
        ("LD_HLR_N8", 0x36, 2, 3, 0),
        ("HALT", 0x76, 1, 1, 0),
        ("ADD_A_HLR", 0x86, 1, 2, 0),
        ("RET_Z", 0xC8, 1, 2, 3),
        ("CALL_NC_N16", 0xD4, 3, 3, 3),
        ("JP_C_N16", 0xDA, 3, 3, 1),
        ("ADD_SP_S8", 0xE8, 2, 4, 0),
        ("RST_7", 0xFF, 1, 4, 0),
    ])
    def test_direct_timings(self, name, encoding, length, cycles, extra):
        opcode = OPCODES_BY_NAME[name]
        assert DIRECT_OPCODE_TABLE[encoding] is opcode
        assert (opcode.total_bytes, opcode.cycles, opcode.additional_cycles) == (length, cycles, extra)

    def test_prefixed_timings(self):
        assert PREFIXED_OPCODE_TABLE[0x46].name == "BIT_0_HLR"
        assert PREFIXED_OPCODE_TABLE[0x46].cycles == 3
        assert PREFIXED_OPCODE_TABLE[0xC6].cycles == 4
        assert PREFIXED_OPCODE_TABLE[0x37].family is Family.SWAP_R8

    # @intent:test_case_duplicate 同じエンコーディングが2つあると表の構築が失敗することを検証します。
    def test_duplicate_encoding_rejected(self):
        dup = (Opcode("X", Kind.DIRECT, 0x00, Family.NOP, 1, 1), Opcode("Y", Kind.DIRECT, 0x00, Family.NOP, 1, 1))
        with pytest.raises(ValueError, match="share encoding"):
            build_opcode_table(Kind.DIRECT, dup)

    def test_invalid_descriptor(self):
        with pytest.raises(ValueError):
            Opcode("X", Kind.DIRECT, 0x100, Family.NOP, 1, 1)
        with pytest.raises(ValueError):
            Opcode("X", Kind.DIRECT, 0x00, Family.NOP, 4, 1)


class TestDecode:
    @pytest.fixture
    def bus(self):
        bus = Bus()
        bus.attach(RamController(Ram(0x10000), 0x0000))
        return bus

    def test_decode_direct(self, bus):
        bus.write(0x0100, 0x3E)
        assert decode(bus, 0x0100).name == "LD_A_N8"

    # @intent:test_case_prefix 0xCBの次のバイトでプレフィックス表が引かれることを検証します。
    def test_decode_prefixed(self, bus):
        bus.write(0x0100, 0xCB)
        bus.write(0x0101, 0x7C)
        opcode = decode(bus, 0x0100)
        assert opcode.name == "BIT_7_H"
        assert opcode.kind is Kind.PREFIXED

    def test_decode_prefix_wraps(self, bus):
        bus.write(0xFFFF, 0xCB)
        bus.write(0x0000, 0x00)
        assert decode(bus, 0xFFFF).name == "RLC_B"

    def test_decode_illegal(self, bus):
        bus.write(0x0200, 0xD3)
        with pytest.raises(DecodeError, match="Invalid opcode D3 at 0x0200"):
            decode(bus, 0x0200)
