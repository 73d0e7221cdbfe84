"""
SM83 算術論理演算 (ALU) 命令、ローテート/シフト命令、ビット操作命令の実装。

フラグの更新は、ALU結果をそのまま採用するか、combine_flagsで
命令ごとの4通りの組み合わせ規則を適用するかのどちらかです。
"""
from dmg_core.common import bits
from dmg_core.arch.sm83 import alu
from dmg_core.arch.sm83.alu import FlagSource as F
from dmg_core.arch.sm83.registers import Reg
from dmg_core.arch.sm83.state import Sm83CpuState
from .base import (
    ExecutionContext, carry_in, combine_flags, extract_bit_index, extract_direction,
    extract_reg, get_reg16_sp, read8_after_opcode, read8_at_hl, set_reg16_sp,
    set_flags, set_reg_and_flags, set_reg_from_alu, write8_at_hl,
    write8_at_hl_and_set_flags,
)


# --- Add ---

# @intent:responsibility ADD A,r / ADC A,r を実行します。ビット3が立っていればキャリーを加えます。
def execute_add_a_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    r = state.registers.get(extract_reg(ctx.opcode, 0))
    set_reg_and_flags(state, Reg.A, alu.add(state.a, r, carry_in(state, ctx.opcode)))


def execute_add_a_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    n = read8_after_opcode(ctx)
    set_reg_and_flags(state, Reg.A, alu.add(state.a, n, carry_in(state, ctx.opcode)))


def execute_add_a_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    v = read8_at_hl(state, ctx)
    set_reg_and_flags(state, Reg.A, alu.add(state.a, v, carry_in(state, ctx.opcode)))


# @intent:responsibility INC r を実行します。Cは変化しません。
def execute_inc_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 3)
    result = alu.add(state.registers.get(reg), 1)
    set_reg_from_alu(state, reg, result)
    combine_flags(state, result, F.ALU, F.V0, F.ALU, F.CPU)


def execute_inc_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.add(read8_at_hl(state, ctx), 1)
    write8_at_hl(state, ctx, result.value)
    combine_flags(state, result, F.ALU, F.V0, F.ALU, F.CPU)


# @intent:responsibility INC rr を実行します。フラグは変化しません。
def execute_inc_r16sp(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.add16_low(get_reg16_sp(state, ctx.opcode), 1)
    set_reg16_sp(state, ctx.opcode, result.value)


def execute_add_hl_r16sp(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.add16_high(state.hl, get_reg16_sp(state, ctx.opcode))
    state.hl = result.value
    combine_flags(state, result, F.CPU, F.V0, F.ALU, F.ALU)


# @intent:responsibility ADD SP,e8 (0xE8) と LD HL,SP+e8 (0xF8) を実行します。
# @intent:rationale 符号付きの即値を16ビットに拡張して加算し、H/Cは下位バイトから計算します。
def execute_ld_hlsp_s8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    offset = bits.sign_extend8(read8_after_opcode(ctx)) & 0xFFFF
    result = alu.add16_low(state.sp, offset)
    combine_flags(state, result, F.V0, F.V0, F.ALU, F.ALU)
    if bits.test(ctx.encoding, 4):
        state.hl = result.value
    else:
        state.sp = result.value


# --- Subtract / compare ---

def execute_sub_a_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    r = state.registers.get(extract_reg(ctx.opcode, 0))
    set_reg_and_flags(state, Reg.A, alu.sub(state.a, r, carry_in(state, ctx.opcode)))


def execute_sub_a_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    n = read8_after_opcode(ctx)
    set_reg_and_flags(state, Reg.A, alu.sub(state.a, n, carry_in(state, ctx.opcode)))


def execute_sub_a_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    v = read8_at_hl(state, ctx)
    set_reg_and_flags(state, Reg.A, alu.sub(state.a, v, carry_in(state, ctx.opcode)))


def execute_dec_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 3)
    result = alu.sub(state.registers.get(reg), 1)
    set_reg_from_alu(state, reg, result)
    combine_flags(state, result, F.ALU, F.V1, F.ALU, F.CPU)


def execute_dec_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.sub(read8_at_hl(state, ctx), 1)
    write8_at_hl(state, ctx, result.value)
    combine_flags(state, result, F.ALU, F.V1, F.ALU, F.CPU)


# @intent:responsibility CP A,r を実行します。Aは変化せず、フラグだけが更新されます。
def execute_cp_a_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_flags(state, alu.sub(state.a, state.registers.get(extract_reg(ctx.opcode, 0))))


def execute_cp_a_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_flags(state, alu.sub(state.a, read8_after_opcode(ctx)))


def execute_cp_a_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_flags(state, alu.sub(state.a, read8_at_hl(state, ctx)))


def execute_dec_r16sp(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg16_sp(state, ctx.opcode, (get_reg16_sp(state, ctx.opcode) - 1) & 0xFFFF)


# --- And, or, xor, complement ---

def execute_and_a_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.and_(state.a, state.registers.get(extract_reg(ctx.opcode, 0))))


def execute_and_a_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.and_(state.a, read8_after_opcode(ctx)))


def execute_and_a_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.and_(state.a, read8_at_hl(state, ctx)))


def execute_or_a_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.or_(state.a, state.registers.get(extract_reg(ctx.opcode, 0))))


def execute_or_a_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.or_(state.a, read8_after_opcode(ctx)))


def execute_or_a_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.or_(state.a, read8_at_hl(state, ctx)))


def execute_xor_a_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.xor(state.a, state.registers.get(extract_reg(ctx.opcode, 0))))


def execute_xor_a_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.xor(state.a, read8_after_opcode(ctx)))


def execute_xor_a_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg_and_flags(state, Reg.A, alu.xor(state.a, read8_at_hl(state, ctx)))


# @intent:responsibility CPL を実行します。ZとCは保持し、NとHは1になります。
def execute_cpl(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.a = bits.complement8(state.a)
    combine_flags(state, None, F.CPU, F.V1, F.V1, F.CPU)


# --- Rotate, shift ---

# @intent:responsibility RLCA / RRCA を実行します。Zは結果に関わらず0になります。
def execute_rotca(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.rotate(extract_direction(ctx.opcode), state.a)
    set_reg_from_alu(state, Reg.A, result)
    combine_flags(state, result, F.V0, F.V0, F.V0, F.ALU)


def execute_rota(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.rotate(extract_direction(ctx.opcode), state.a, state.flag_c)
    set_reg_from_alu(state, Reg.A, result)
    combine_flags(state, result, F.V0, F.V0, F.V0, F.ALU)


def execute_rotc_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 0)
    set_reg_and_flags(state, reg, alu.rotate(extract_direction(ctx.opcode), state.registers.get(reg)))


def execute_rot_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 0)
    result = alu.rotate(extract_direction(ctx.opcode), state.registers.get(reg), state.flag_c)
    set_reg_and_flags(state, reg, result)


def execute_rotc_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.rotate(extract_direction(ctx.opcode), read8_at_hl(state, ctx))
    write8_at_hl_and_set_flags(state, ctx, result)


def execute_rot_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.rotate(extract_direction(ctx.opcode), read8_at_hl(state, ctx), state.flag_c)
    write8_at_hl_and_set_flags(state, ctx, result)


def execute_swap_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 0)
    set_reg_and_flags(state, reg, alu.swap(state.registers.get(reg)))


def execute_swap_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8_at_hl_and_set_flags(state, ctx, alu.swap(read8_at_hl(state, ctx)))


def execute_sla_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 0)
    set_reg_and_flags(state, reg, alu.shift_left(state.registers.get(reg)))


def execute_sra_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 0)
    set_reg_and_flags(state, reg, alu.shift_right_arithmetic(state.registers.get(reg)))


def execute_srl_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 0)
    set_reg_and_flags(state, reg, alu.shift_right_logical(state.registers.get(reg)))


def execute_sla_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8_at_hl_and_set_flags(state, ctx, alu.shift_left(read8_at_hl(state, ctx)))


def execute_sra_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8_at_hl_and_set_flags(state, ctx, alu.shift_right_arithmetic(read8_at_hl(state, ctx)))


def execute_srl_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8_at_hl_and_set_flags(state, ctx, alu.shift_right_logical(read8_at_hl(state, ctx)))


# --- Bit test and set ---

# @intent:responsibility BIT b,r を実行します。Cは直前の値を保持します。
def execute_bit_u3_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    value = state.registers.get(extract_reg(ctx.opcode, 0))
    result = alu.test_bit(value, extract_bit_index(ctx.opcode))
    combine_flags(state, result, F.ALU, F.V0, F.V1, F.CPU)


def execute_bit_u3_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.test_bit(read8_at_hl(state, ctx), extract_bit_index(ctx.opcode))
    combine_flags(state, result, F.ALU, F.V0, F.V1, F.CPU)


# @intent:responsibility RES b,r / SET b,r を実行します。ビット6が新しいビット値を表します。
def execute_chg_u3_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    reg = extract_reg(ctx.opcode, 0)
    new_value = bits.test(ctx.encoding, 6)
    state.registers.set(reg, bits.set_bit(state.registers.get(reg), extract_bit_index(ctx.opcode), new_value))


def execute_chg_u3_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    new_value = bits.test(ctx.encoding, 6)
    write8_at_hl(state, ctx, bits.set_bit(read8_at_hl(state, ctx), extract_bit_index(ctx.opcode), new_value))


# --- Misc. ALU ---

def execute_daa(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    result = alu.bcd_adjust(state.a, state.flag_n, state.flag_h, state.flag_c)
    set_reg_from_alu(state, Reg.A, result)
    combine_flags(state, result, F.ALU, F.CPU, F.V0, F.ALU)


# @intent:responsibility SCF (0x37) はCを1に、CCF (0x3F) はCを反転します。
def execute_sccf(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    new_c = not bits.test(ctx.encoding, 3) or not state.flag_c
    result = alu.AluResult(0, alu.Flags(c=new_c))
    combine_flags(state, result, F.CPU, F.V0, F.V0, F.ALU)
