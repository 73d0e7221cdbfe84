# dmg_core/transport/bus.py
"""
Transport Layer (共通バス)

このモジュールは、16ビットのアドレス空間を共有するコンポーネント群を束ね、
読み書きアクセスを調停する責務を負います。
各コンポーネントは自分のアドレスかどうかを自身で判断し、
自分のアドレスでなければNO_DATAを返します。
"""
from abc import ABC, abstractmethod
from typing import List

from dmg_core.common.bits import check_bits8, check_bits16

# @intent:constant 「このアドレスは自分のものではない」ことを示す帯域外の値。
NO_DATA = 0x100

# @intent:constant どのコンポーネントも応答しなかった場合の値（オープンバスのプルアップ）。
OPEN_BUS = 0xFF


# @intent:responsibility バスに接続されるコンポーネントの抽象インターフェースを定義します。
class Component(ABC):
    """
    バスに接続されるコンポーネントの抽象基底クラス。
    アドレスは常にバス上の絶対アドレス（16ビット）として渡されます。
    """
    # @intent:responsibility 指定されたアドレスから8bitのデータを読み出します。
    # @intent:post-condition 自分のアドレスでない場合はNO_DATAを返します。
    @abstractmethod
    def read(self, address: int) -> int:
        pass

    # @intent:responsibility 指定されたアドレスに8bitのデータを書き込みます。
    # @intent:rationale 全ての書き込みはブロードキャストされるため、自分のアドレスでなければ無視します。
    @abstractmethod
    def write(self, address: int, data: int) -> None:
        pass

    # @intent:responsibility このコンポーネントをバスに接続します。
    def attach_to(self, bus: "Bus") -> None:
        bus.attach(self)


# @intent:responsibility グローバルクロックで駆動される要素のインターフェースを定義します。
class Clocked(ABC):
    """
    マシンサイクルごとに駆動されるコンポーネント。
    ドライバは単調非減少のサイクル番号でcycleを呼び出します。
    """
    @abstractmethod
    def cycle(self, cycle: int) -> None:
        pass


# @intent:responsibility 接続順に優先度付けされたコンポーネントのリストでアクセスを調停します。
class Bus:
    """
    16ビットのメモリ空間を共有する共通バス。
    読み込みは接続順に問い合わせ、最初にNO_DATA以外を返したコンポーネントの値を採用します。
    書き込みは全てのコンポーネントに無条件でブロードキャストします。
    """
    def __init__(self):
        self._components: List[Component] = []

    # @intent:responsibility コンポーネントを接続リストの末尾に追加します。
    # @intent:pre-condition componentはComponentのインスタンスである必要があります。
    def attach(self, component: Component) -> None:
        if not isinstance(component, Component):
            raise TypeError("Component must be an instance of a class derived from Component.")
        self._components.append(component)

    # @intent:responsibility 接続済みのコンポーネントを接続順に返します。
    def components(self) -> List[Component]:
        return list(self._components)

    # @intent:responsibility 指定アドレスの値を接続順に問い合わせて読み出します。
    # @intent:post-condition 誰も応答しなければOPEN_BUS(0xFF)を返します。
    def read(self, address: int) -> int:
        check_bits16(address)
        for component in self._components:
            data = component.read(address)
            if data != NO_DATA:
                return data
        return OPEN_BUS

    # @intent:responsibility 全てのコンポーネントに書き込みをブロードキャストします。
    def write(self, address: int, data: int) -> None:
        check_bits16(address)
        check_bits8(data)
        for component in self._components:
            component.write(address, data)
