"""
エミュレーションコアの例外定義。

引数の範囲外などの契約違反は組み込み例外（ValueError, IndexError）で通知し、
ここではデコード失敗と未対応命令のみを扱います。
"""


class EmulationError(Exception):
    """エミュレーションコアが送出する例外の基底クラス。"""


# @intent:responsibility 未登録のオペコードスロットへのディスパッチを通知します。
class DecodeError(EmulationError):
    def __init__(self, encoding: int, address: int, prefixed: bool = False):
        self.encoding = encoding
        self.address = address
        self.prefixed = prefixed
        prefix = "CB " if prefixed else ""
        super().__init__(f"Invalid opcode {prefix}{encoding:02X} at {address:#06x}.")


# @intent:responsibility 意図的に実装していない命令（STOP）の実行を通知します。
class UnsupportedInstructionError(EmulationError):
    def __init__(self, name: str, address: int):
        self.name = name
        self.address = address
        super().__init__(f"{name} at {address:#06x} is not supported.")
