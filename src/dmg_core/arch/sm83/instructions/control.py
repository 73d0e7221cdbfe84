"""
SM83 制御命令（ジャンプ、コール、リターン、割り込み制御、HALT/STOP）の実装。

分岐先は ctx.next_pc に書き込み、実行エンジンが命令の完了後にPCへ反映します。
条件付き分岐が成立した場合は ctx.branch_taken を立て、追加サイクルを課金させます。
"""
from dmg_core.common import bits
from dmg_core.common.exceptions import UnsupportedInstructionError
from dmg_core.arch.sm83.state import Sm83CpuState
from .base import (
    ExecutionContext, extract_condition, pop16, push16, read8_after_opcode,
    read16_after_opcode,
)


def execute_nop(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    pass


# --- Jumps ---

def execute_jp_hl(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    ctx.next_pc = state.hl


def execute_jp_n16(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    ctx.next_pc = read16_after_opcode(ctx)


def execute_jp_cc_n16(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    if extract_condition(state, ctx.opcode):
        ctx.next_pc = read16_after_opcode(ctx)
        ctx.branch_taken = True


# @intent:responsibility 相対ジャンプを実行します。オフセットは次の命令のアドレスからの符号付き値です。
def execute_jr_e8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    ctx.next_pc = (ctx.next_pc + bits.sign_extend8(read8_after_opcode(ctx))) & 0xFFFF


def execute_jr_cc_e8(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    if extract_condition(state, ctx.opcode):
        execute_jr_e8(state, ctx)
        ctx.branch_taken = True


# --- Calls and returns ---

# @intent:responsibility 戻りアドレス（次の命令のアドレス）をプッシュしてからジャンプします。
def execute_call_n16(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    target = read16_after_opcode(ctx)
    push16(state, ctx.bus, ctx.next_pc)
    ctx.next_pc = target


def execute_call_cc_n16(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    if extract_condition(state, ctx.opcode):
        execute_call_n16(state, ctx)
        ctx.branch_taken = True


# @intent:responsibility RST n を実行します。ビット3-5がリスタートベクタの番号です。
def execute_rst_u3(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    push16(state, ctx.bus, ctx.next_pc)
    ctx.next_pc = ctx.address_map.restart_vectors[bits.extract(ctx.encoding, 3, 3)]


def execute_ret(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    ctx.next_pc = pop16(state, ctx.bus)


def execute_ret_cc(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    if extract_condition(state, ctx.opcode):
        ctx.next_pc = pop16(state, ctx.bus)
        ctx.branch_taken = True


# --- Interrupts, control ---

# @intent:responsibility EI (0xFB) / DI (0xF3) を実行します。IMEの変更は即座に反映されます。
def execute_edi(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.ime = bits.test(ctx.encoding, 3)


def execute_reti(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    state.ime = True
    ctx.next_pc = pop16(state, ctx.bus)


# @intent:responsibility HALTを実行します。PCは次の命令を指したまま、エンジンはIdleに移行します。
def execute_halt(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    ctx.halted = True


def execute_stop(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    raise UnsupportedInstructionError(ctx.opcode.name, ctx.pc)
