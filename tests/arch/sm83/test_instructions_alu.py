# tests/arch/sm83/test_instructions_alu.py
"""
SM83 ALU命令（直接命令）の実行テスト。
命令ファミリーごとのフラグの組み合わせ規則（0固定、1固定、ALU結果、直前の値）を検証します。
"""
import pytest
from dmg_core.arch.sm83.cpu import Sm83Cpu
from dmg_core.transport.bus import Bus
from dmg_core.transport.memory import Ram, RamController


def _flags(state):
    return (state.flag_z, state.flag_n, state.flag_h, state.flag_c)


class TestAluInstructions:
    @pytest.fixture
    def setup_cpu(self):
        bus = Bus()
        cpu = Sm83Cpu()
        cpu.attach_to(bus)
        bus.attach(RamController(Ram(0x10000), 0x0000))
        return cpu, bus

    def _run(self, cpu, bus, program, count=1):
        for i, byte in enumerate(program):
            bus.write(cpu.get_state().pc + i, byte)
        for _ in range(count):
            cpu.cycle(cpu.schedule.cycle)

    def test_add_a_r(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0xFF
        state.b = 0x01
        self._run(cpu, bus, [0x80])  # ADD A,B
        assert state.a == 0x00
        assert _flags(state) == (True, False, True, True)

    # @intent:test_case_adc ADCはキャリーを加算し、ADDは無視することを検証します。
    def test_adc_uses_carry(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x10
        state.flag_c = True
        self._run(cpu, bus, [0xCE, 0x01])  # ADC A,0x01
        assert state.a == 0x12
        state.flag_c = True
        self._run(cpu, bus, [0xC6, 0x01])  # ADD A,0x01
        assert state.a == 0x13

    def test_sbc_and_cp(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x10
        state.flag_c = True
        self._run(cpu, bus, [0xDE, 0x0F])  # SBC A,0x0F
        assert state.a == 0x00
        assert _flags(state) == (True, True, True, False)
        state.a = 0x05
        self._run(cpu, bus, [0xFE, 0x06])  # CP 0x06
        assert state.a == 0x05
        assert _flags(state) == (False, True, True, True)

    def test_alu_hl_indirect(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.hl = 0xC000
        state.a = 0x0F
        bus.write(0xC000, 0xF0)
        self._run(cpu, bus, [0xB6])  # OR A,(HL)
        assert state.a == 0xFF
        assert state.f == 0x00
        self._run(cpu, bus, [0xA6])  # AND A,(HL)
        assert state.a == 0xF0
        assert _flags(state) == (False, False, True, False)
        self._run(cpu, bus, [0xAE])  # XOR A,(HL)
        assert state.a == 0x00
        assert _flags(state) == (True, False, False, False)

    # @intent:test_case_inc_dec INC/DECはCを保持し、DECはNを1にすることを検証します。
    def test_inc_dec_preserve_carry(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.c = 0x0F
        state.flag_c = True
        self._run(cpu, bus, [0x0C])  # INC C
        assert state.c == 0x10
        assert _flags(state) == (False, False, True, True)
        state.d = 0x01
        self._run(cpu, bus, [0x15])  # DEC D
        assert state.d == 0x00
        assert _flags(state) == (True, True, False, True)

    def test_inc_dec_hl_indirect(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.hl = 0xC000
        bus.write(0xC000, 0xFF)
        self._run(cpu, bus, [0x34])  # INC (HL)
        assert bus.read(0xC000) == 0x00
        assert state.flag_z is True
        assert cpu.schedule.cycle == 3
        self._run(cpu, bus, [0x35])  # DEC (HL)
        assert bus.read(0xC000) == 0xFF
        assert state.flag_n is True

    # @intent:test_case_16bit INC rr / DEC rr はフラグを変更しないことを検証します。
    def test_inc_dec_r16_keep_flags(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.f = 0xF0
        state.de = 0xFFFF
        state.sp = 0x0000
        self._run(cpu, bus, [0x13, 0x3B], count=2)  # INC DE; DEC SP
        assert state.de == 0x0000
        assert state.sp == 0xFFFF
        assert state.f == 0xF0

    def test_add_hl_r16(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.hl = 0x0FFF
        state.bc = 0x0001
        state.flag_z = True
        self._run(cpu, bus, [0x09])  # ADD HL,BC
        assert state.hl == 0x1000
        assert _flags(state) == (True, False, True, False)

    # @intent:test_case_sp_offset ADD SP,e8 と LD HL,SP+e8 が符号付きオフセットを扱い、H/Cを下位バイトから計算することを検証します。
    def test_add_sp_e8(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.sp = 0xFFF8
        state.flag_z = True
        self._run(cpu, bus, [0xE8, 0x08])  # ADD SP,+8
        assert state.sp == 0x0000
        assert _flags(state) == (False, False, True, True)

    def test_ld_hl_sp_e8_negative(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.sp = 0x1000
        self._run(cpu, bus, [0xF8, 0xFE])  # LD HL,SP-2
        assert state.hl == 0x0FFE
        assert state.sp == 0x1000
        assert _flags(state) == (False, False, False, False)

    def test_cpl(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x35
        state.flag_z = True
        state.flag_c = True
        self._run(cpu, bus, [0x2F])
        assert state.a == 0xCA
        assert _flags(state) == (True, True, True, True)

    # @intent:test_case_rotate_a RLCA/RRA はZを常に0にすることを検証します。
    def test_rotate_a(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x00
        state.flag_z = True
        self._run(cpu, bus, [0x07])  # RLCA
        assert state.a == 0x00
        assert _flags(state) == (False, False, False, False)
        state.a = 0x01
        state.flag_c = False
        self._run(cpu, bus, [0x1F])  # RRA
        assert state.a == 0x00
        assert _flags(state) == (False, False, False, True)
        self._run(cpu, bus, [0x17])  # RLA
        assert state.a == 0x01
        assert state.flag_c is False
        state.a = 0x01
        self._run(cpu, bus, [0x0F])  # RRCA
        assert state.a == 0x80
        assert state.flag_c is True

    # @intent:test_case_daa 加算後のDAAがBCDに補正することを検証します。
    def test_daa_after_add(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x45
        state.b = 0x38
        self._run(cpu, bus, [0x80, 0x27], count=2)  # ADD A,B; DAA
        assert state.a == 0x83
        assert _flags(state) == (False, False, False, False)

    def test_daa_after_sub(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.a = 0x10
        self._run(cpu, bus, [0xD6, 0x01, 0x27], count=2)  # SUB 0x01; DAA
        assert state.a == 0x09
        assert state.flag_n is True
        assert state.flag_h is False

    def test_scf_ccf(self, setup_cpu):
        cpu, bus = setup_cpu
        state = cpu.get_state()
        state.f = 0xE0
        self._run(cpu, bus, [0x37])  # SCF
        assert _flags(state) == (True, False, False, True)
        self._run(cpu, bus, [0x3F])  # CCF
        assert _flags(state) == (True, False, False, False)
        self._run(cpu, bus, [0x3F])  # CCF
        assert state.flag_c is True
