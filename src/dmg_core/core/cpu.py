# dmg_core/core/cpu.py
"""
Core Layer (抽象CPU)

このモジュールは、CPUの基本的な状態管理と、グローバルクロックに同期した
命令ディスパッチの駆動（スケジューリング）に関する抽象化を提供します。
具体的な命令の振る舞いはInstruction Layerに移譲されます。
"""
from abc import abstractmethod
from typing import Optional

from dmg_core.common.exceptions import EmulationError
from dmg_core.core.state import ActiveAt, CpuState, IDLE, Idle, Schedule
from dmg_core.transport.bus import Bus, Clocked, Component


# @intent:responsibility 抽象CPUの基本機能とスケジューラのテンプレートを定義します。
class AbstractCpu(Component, Clocked):
    """
    全てのCPUエミュレーションの基底となる抽象クラス。
    バス上のコンポーネントであると同時にクロック駆動の要素でもあり、
    cycleが呼ばれるたびに「待機」か「1命令（または1割り込み）の実行」のどちらかを行います。
    """
    # @intent:responsibility CPUの状態とスケジュールを初期化します。バスへの接続はattach_toで行います。
    def __init__(self):
        self._bus: Optional[Bus] = None
        self._state: CpuState = self._create_initial_state()
        self._schedule: Schedule = ActiveAt(0)
        # @intent:rationale Stateオブジェクトの直接操作を避けるため、protectedな命名規則を採用。
        #                  外部からのアクセスは`get_state()`メソッドを介して行う。

    # @intent:responsibility 初期状態のCpuStateオブジェクトを生成します。
    @abstractmethod
    def _create_initial_state(self) -> CpuState:
        """
        CPUの初期状態を生成して返します。
        具体的なCPUアーキテクチャはこのメソッドを実装し、
        そのアーキテクチャに特化したCpuStateのサブクラスを返すことができます。
        """
        pass

    # @intent:responsibility CPUをバスに接続し、以後の命令実行で使うバスとして保持します。
    def attach_to(self, bus: Bus) -> None:
        self._bus = bus
        bus.attach(self)

    @property
    def bus(self) -> Bus:
        if self._bus is None:
            raise EmulationError("CPU is not attached to a bus.")
        return self._bus

    # @intent:responsibility CPUをリセットし、初期状態とサイクル0での実行開始に戻します。
    def reset(self) -> None:
        self._state = self._create_initial_state()
        self._schedule = ActiveAt(0)

    # @intent:responsibility 現在のCPUの状態を返します。
    def get_state(self) -> CpuState:
        return self._state

    # @intent:responsibility 現在のスケジュール（IdleまたはActiveAt）を返します。
    @property
    def schedule(self) -> Schedule:
        return self._schedule

    # @intent:responsibility 1マシンサイクル分CPUを駆動します。
    # @intent:pre-condition cycleは呼び出しごとに単調非減少である必要があります。
    # @intent:rationale Template Methodパターンを採用し、共通のスケジューリング
    #                  （起床→ビジー判定→割り込み/命令のディスパッチ→次のサイクルの決定）を定義します。
    def cycle(self, cycle: int) -> None:
        """
        Idle中に割り込み要求があればこのサイクルで起床します。
        スケジュールされたサイクルと一致しなければ、前の命令の実行中として何もしません。
        """
        if isinstance(self._schedule, Idle):
            if not self._has_wake_request():
                return
            self._schedule = ActiveAt(cycle)

        if self._schedule.cycle != cycle:
            return

        cost = self._service_interrupt()
        if cost is None:
            cost = self._step()
        self._schedule = IDLE if cost is None else self._schedule.after(cost)

    def advance(self, cycle: int) -> None:
        """cycleの別名です。"""
        self.cycle(cycle)

    # @intent:responsibility Idle状態から起床すべき割り込み要求があるかを返します。
    @abstractmethod
    def _has_wake_request(self) -> bool:
        pass

    # @intent:responsibility 割り込みを受け付けられれば処理し、そのコストを返します。
    # @intent:return 割り込みを処理しなかった場合はNone。
    @abstractmethod
    def _service_interrupt(self) -> Optional[int]:
        pass

    # @intent:responsibility PCの命令を1つフェッチ・デコード・実行し、そのコストを返します。
    # @intent:return CPUが停止状態（Idle）に移行する場合はNone。
    @abstractmethod
    def _step(self) -> Optional[int]:
        pass
