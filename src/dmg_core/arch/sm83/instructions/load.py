"""
SM83 ロード/ストア命令とスタック操作の実装。
"""
from dmg_core.arch.sm83.state import Sm83CpuState
from .base import (
    ExecutionContext, extract_hl_increment, extract_reg, extract_reg16, pop16, push16,
    read8, read8_after_opcode, read8_at_hl, read16_after_opcode, set_reg16_sp,
    write8, write8_at_hl, write16,
)


# --- Load ---

def execute_ld_r8_hlr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.registers.set(extract_reg(ctx.opcode, 3), read8_at_hl(state, ctx))


# @intent:responsibility LD A,(HL+) / LD A,(HL-) を実行します。
def execute_ld_a_hlru(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.a = read8_at_hl(state, ctx)
    state.hl = (state.hl + extract_hl_increment(ctx.opcode)) & 0xFFFF


# @intent:responsibility LDH A,(n8) を実行します。アドレスはI/Oレジスタ領域の先頭からのオフセットです。
def execute_ld_a_n8r(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.a = read8(ctx, ctx.address_map.regs_start + read8_after_opcode(ctx))


def execute_ld_a_cr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.a = read8(ctx, ctx.address_map.regs_start + state.c)


def execute_ld_a_n16r(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.a = read8(ctx, read16_after_opcode(ctx))


def execute_ld_a_bcr(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.a = read8(ctx, state.bc)


def execute_ld_a_der(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.a = read8(ctx, state.de)


def execute_ld_r8_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.registers.set(extract_reg(ctx.opcode, 3), read8_after_opcode(ctx))


def execute_ld_r16sp_n16(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    set_reg16_sp(state, ctx.opcode, read16_after_opcode(ctx))


# @intent:responsibility POP rr を実行します。POP AF ではFの下位ニブルが落とされます。
def execute_pop_r16(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.set16(extract_reg16(ctx.opcode), pop16(state, ctx.bus))


# --- Store ---

def execute_ld_hlr_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8_at_hl(state, ctx, state.registers.get(extract_reg(ctx.opcode, 0)))


def execute_ld_hlru_a(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8_at_hl(state, ctx, state.a)
    state.hl = (state.hl + extract_hl_increment(ctx.opcode)) & 0xFFFF


def execute_ld_n8r_a(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8(ctx, ctx.address_map.regs_start + read8_after_opcode(ctx), state.a)


def execute_ld_cr_a(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8(ctx, ctx.address_map.regs_start + state.c, state.a)


def execute_ld_n16r_a(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8(ctx, read16_after_opcode(ctx), state.a)


def execute_ld_bcr_a(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8(ctx, state.bc, state.a)


def execute_ld_der_a(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8(ctx, state.de, state.a)


def execute_ld_hlr_n8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write8_at_hl(state, ctx, read8_after_opcode(ctx))


def execute_ld_n16r_sp(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    write16(ctx, read16_after_opcode(ctx), state.sp)


def execute_push_r16(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    push16(state, ctx.bus, state.get16(extract_reg16(ctx.opcode)))


# --- Move ---

def execute_ld_r8_r8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    dst = extract_reg(ctx.opcode, 3)
    src = extract_reg(ctx.opcode, 0)
    if dst is not src:
        state.registers.set(dst, state.registers.get(src))


def execute_ld_sp_hl(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.sp = state.hl
