"""
ビット/バイト操作ユーティリティ。

マスク生成、ビット抽出、ローテート、符号拡張、16ビット合成などの
状態を持たない純粋関数群を提供します。
引数の範囲外は黙って丸めず、必ず例外で通知します。
"""

# @intent:constant 8ビット値のビット反転表。reverse8で使用します。
_REVERSE_LOOKUP = tuple(int(f"{b:08b}"[::-1], 2) for b in range(0x100))


# @intent:responsibility 値が8ビットに収まることを検証し、そのまま返します。
# @intent:pre-condition vは0以上0xFF以下の整数である必要があります。
def check_bits8(v: int) -> int:
    if not isinstance(v, int) or not 0 <= v <= 0xFF:
        raise ValueError(f"Value {v!r} is not an 8-bit value.")
    return v


# @intent:responsibility 値が16ビットに収まることを検証し、そのまま返します。
def check_bits16(v: int) -> int:
    if not isinstance(v, int) or not 0 <= v <= 0xFFFF:
        raise ValueError(f"Value {v!r} is not a 16-bit value.")
    return v


def _check_index(index: int) -> None:
    if not 0 <= index < 32:
        raise IndexError(f"Bit index {index} out of range [0, 31].")


def mask(index: int) -> int:
    """指定位置のビットだけが1の値を返します。"""
    _check_index(index)
    return 1 << index


def test(bits: int, index: int) -> bool:
    """指定位置のビットが1かどうかを返します。"""
    return (bits & mask(index)) != 0


def set_bit(bits: int, index: int, value: bool) -> int:
    """指定位置のビットをvalueに設定した値を返します。"""
    if value:
        return bits | mask(index)
    return bits & ~mask(index)


def clip(size: int, bits: int) -> int:
    """下位sizeビットだけを残した値を返します。"""
    if not 0 <= size <= 32:
        raise ValueError(f"Clip size {size} out of range [0, 32].")
    return bits & ((1 << size) - 1)


def extract(bits: int, start: int, size: int) -> int:
    """startビット目からsizeビット分を取り出します。"""
    if start < 0 or size < 0 or start + size > 32:
        raise IndexError(f"Invalid bit range: start={start}, size={size}.")
    return clip(size, bits >> start)


# @intent:responsibility sizeビット幅の値をdistanceだけローテートします。
# @intent:rationale 正のdistanceは左回転、負のdistanceは右回転を意味します。
def rotate(size: int, bits: int, distance: int) -> int:
    if not 0 < size <= 32:
        raise ValueError(f"Rotate size {size} out of range [1, 32].")
    d = distance % size
    return clip(size, (bits << d) | (bits >> (size - d)))


def sign_extend8(b: int) -> int:
    """8ビット値を符号付き整数（-128〜127）として解釈します。"""
    check_bits8(b)
    return b - 0x100 if b & 0x80 else b


def reverse8(b: int) -> int:
    """8ビット値のビット順序を反転します。"""
    check_bits8(b)
    return _REVERSE_LOOKUP[b]


def complement8(b: int) -> int:
    """8ビット値の全ビットを反転します。"""
    check_bits8(b)
    return b ^ 0xFF


# @intent:responsibility 上位バイトと下位バイトから16ビット値を合成します。
def make16(high: int, low: int) -> int:
    check_bits8(high)
    check_bits8(low)
    return (high << 8) | low
