"""
SM83命令セット実装パッケージ。
"""
from dmg_core.common.exceptions import DecodeError
from dmg_core.arch.sm83.opcodes import Kind
from dmg_core.arch.sm83.state import Sm83CpuState
from .base import ExecutionContext
from .maps import EXECUTE_MAP


# @intent:responsibility デコードされたSM83命令を実行し、CPUの状態とバスを変更します。
# @intent:pre-condition `ctx.next_pc`は命令長を加えた次の命令のアドレスで初期化されている必要があります。
def execute_instruction(state: Sm83CpuState, ctx: ExecutionContext) -> None:
    """
    命令ファミリーに対応する実行関数を呼び出します。
    実行関数が見つからない場合はDecodeErrorを送出します。
    """
    executor = EXECUTE_MAP.get(ctx.opcode.family)
    if executor is None:
        raise DecodeError(ctx.encoding, ctx.pc, prefixed=ctx.opcode.kind is Kind.PREFIXED)
    executor(state, ctx)
