# dmg_core/core/state.py
"""
Core Layer (CPU状態とスケジューリング状態)

このモジュールは、CPUの基本的な状態（PC, SP）と、
実行エンジンの「次に動作するサイクル」を表す2状態のスケジュールを定義します。
"""
from dataclasses import dataclass
from typing import Union


# @intent:responsibility CPUのレジスタ状態を保持します。アーキテクチャ固有のレジスタはこれを拡張します。
@dataclass
class CpuState:
    """
    CPUのレジスタ状態を保持するデータクラス。
    PCとSPはどちらも16ビットで、全ての演算は65536を法として折り返します。
    """
    pc: int = 0x0000  # Program Counter
    sp: int = 0x0000  # Stack Pointer


# @intent:responsibility 完全に停止し、割り込み要求で起床を待つ状態を表します。
@dataclass(frozen=True)
class Idle:
    pass


# @intent:responsibility 指定されたサイクルで次の命令（または割り込み）を実行する状態を表します。
@dataclass(frozen=True)
class ActiveAt:
    cycle: int

    # @intent:responsibility 命令のコスト分だけ先のサイクルを指す新しい状態を返します。
    def after(self, cycles: int) -> "ActiveAt":
        return ActiveAt(self.cycle + cycles)


IDLE = Idle()

Schedule = Union[Idle, ActiveAt]
