"""
SM83命令セット実装のための共通ヘルパー関数と実行コンテキスト。
"""
from dataclasses import dataclass
from typing import Optional

from dmg_core.common import bits
from dmg_core.arch.sm83.alu import AluResult, FlagSource, RotDir, mask_znhc
from dmg_core.arch.sm83.opcodes import Opcode
from dmg_core.arch.sm83.registers import Reg, Reg16
from dmg_core.arch.sm83.state import Sm83CpuState
from dmg_core.config.models import AddressMap
from dmg_core.transport.bus import Bus

# 3ビットのレジスタコード順 (110は(HL)で、レジスタとしては使いません)
REGISTER_CODES = (Reg.B, Reg.C, Reg.D, Reg.E, Reg.H, Reg.L, None, Reg.A)

# 2ビットのレジスタペアコード順 (11はSPまたはAFとして命令側で解釈します)
REGISTER_PAIR_CODES = (Reg16.BC, Reg16.DE, Reg16.HL, Reg16.AF)


# @intent:responsibility 1命令の実行中に共有される情報（記述子、PC、次のPC、分岐成立）を保持します。
@dataclass
class ExecutionContext:
    bus: Bus
    address_map: AddressMap
    opcode: Opcode
    pc: int
    next_pc: int
    branch_taken: bool = False
    halted: bool = False

    @property
    def encoding(self) -> int:
        return self.opcode.encoding


# --- Bus access ---

def read8(ctx: ExecutionContext, address: int) -> int:
    return ctx.bus.read(address & 0xFFFF)


# @intent:utility_function オペコード直後のバイト（即値、またはプレフィックス命令の2バイト目）を読み出します。
def read8_after_opcode(ctx: ExecutionContext) -> int:
    return ctx.bus.read((ctx.pc + 1) & 0xFFFF)


# @intent:utility_function リトルエンディアンの16ビット値を読み出します。
def read16(ctx: ExecutionContext, address: int) -> int:
    low = ctx.bus.read(address & 0xFFFF)
    high = ctx.bus.read((address + 1) & 0xFFFF)
    return bits.make16(high, low)


def read16_after_opcode(ctx: ExecutionContext) -> int:
    return read16(ctx, ctx.pc + 1)


def write8(ctx: ExecutionContext, address: int, value: int) -> None:
    ctx.bus.write(address & 0xFFFF, value)


def write16(ctx: ExecutionContext, address: int, value: int) -> None:
    ctx.bus.write(address & 0xFFFF, value & 0xFF)
    ctx.bus.write((address + 1) & 0xFFFF, (value >> 8) & 0xFF)


def read8_at_hl(state: Sm83CpuState, ctx: ExecutionContext) -> int:
    return ctx.bus.read(state.hl)


def write8_at_hl(state: Sm83CpuState, ctx: ExecutionContext, value: int) -> None:
    ctx.bus.write(state.hl, value)


# @intent:utility_function SPを2減らしてから16ビット値をスタックに積みます。
def push16(state: Sm83CpuState, bus: Bus, value: int) -> None:
    state.sp = (state.sp - 2) & 0xFFFF
    bus.write(state.sp, value & 0xFF)
    bus.write((state.sp + 1) & 0xFFFF, (value >> 8) & 0xFF)


# @intent:utility_function スタックから16ビット値を取り出し、SPを2増やします。
def pop16(state: Sm83CpuState, bus: Bus) -> int:
    low = bus.read(state.sp)
    high = bus.read((state.sp + 1) & 0xFFFF)
    state.sp = (state.sp + 2) & 0xFFFF
    return bits.make16(high, low)


# --- Parameter extraction ---

# @intent:utility_function エンコーディングのstart_bitから3ビットをレジスタとして解釈します。
def extract_reg(opcode: Opcode, start_bit: int) -> Reg:
    code = bits.extract(opcode.encoding, start_bit, 3)
    reg = REGISTER_CODES[code]
    if reg is None:
        raise ValueError(f"Opcode {opcode.name} encodes (HL) where a register is expected.")
    return reg


def extract_reg16(opcode: Opcode) -> Reg16:
    return REGISTER_PAIR_CODES[bits.extract(opcode.encoding, 4, 2)]


# @intent:utility_function レジスタペアのコード11をSPとして扱う命令のために、SPかどうかを判定します。
def encodes_sp(opcode: Opcode) -> bool:
    return bits.extract(opcode.encoding, 4, 2) == 0b11


def get_reg16_sp(state: Sm83CpuState, opcode: Opcode) -> int:
    return state.sp if encodes_sp(opcode) else state.get16(extract_reg16(opcode))


def set_reg16_sp(state: Sm83CpuState, opcode: Opcode, value: int) -> None:
    if encodes_sp(opcode):
        state.sp = bits.check_bits16(value)
    else:
        state.set16(extract_reg16(opcode), value)


def extract_hl_increment(opcode: Opcode) -> int:
    return -1 if bits.test(opcode.encoding, 4) else 1


def extract_direction(opcode: Opcode) -> RotDir:
    return RotDir.RIGHT if bits.test(opcode.encoding, 3) else RotDir.LEFT


def extract_bit_index(opcode: Opcode) -> int:
    return bits.extract(opcode.encoding, 3, 3)


# @intent:utility_function ADC/SBCの場合だけ、現在のキャリーを演算に渡します。
def carry_in(state: Sm83CpuState, opcode: Opcode) -> bool:
    return state.flag_c and bits.test(opcode.encoding, 3)


# @intent:utility_function 条件コード(NZ, Z, NC, C)を現在のフラグで評価します。
def extract_condition(state: Sm83CpuState, opcode: Opcode) -> bool:
    cc = bits.extract(opcode.encoding, 3, 2)
    if cc == 0:
        return not state.flag_z
    if cc == 1:
        return state.flag_z
    if cc == 2:
        return not state.flag_c
    return state.flag_c


# --- Flags ---

def set_reg_from_alu(state: Sm83CpuState, reg: Reg, result: AluResult) -> None:
    state.registers.set(reg, result.value)


def set_flags(state: Sm83CpuState, result: AluResult) -> None:
    state.f = result.flags.to_byte()


def set_reg_and_flags(state: Sm83CpuState, reg: Reg, result: AluResult) -> None:
    set_reg_from_alu(state, reg, result)
    set_flags(state, result)


def write8_at_hl_and_set_flags(state: Sm83CpuState, ctx: ExecutionContext, result: AluResult) -> None:
    write8_at_hl(state, ctx, result.value)
    set_flags(state, result)


def _source_mask(source: FlagSource, z: FlagSource, n: FlagSource, h: FlagSource, c: FlagSource) -> int:
    return mask_znhc(z is source, n is source, h is source, c is source)


# @intent:responsibility 各フラグを0固定・1固定・ALU結果・直前のFのいずれから取るか組み合わせてFを更新します。
def combine_flags(state: Sm83CpuState, result: Optional[AluResult],
                  z: FlagSource, n: FlagSource, h: FlagSource, c: FlagSource) -> None:
    alu_flags = result.flags.to_byte() if result is not None else 0
    from_v1 = _source_mask(FlagSource.V1, z, n, h, c)
    from_alu = _source_mask(FlagSource.ALU, z, n, h, c) & alu_flags
    from_cpu = _source_mask(FlagSource.CPU, z, n, h, c) & state.f
    state.f = from_v1 | from_alu | from_cpu
