"""
SM83 オペコード表。

各命令をOpcode記述子（ファミリ、命令長、サイクル数、条件成立時の追加サイクル数、
直接/プレフィックスの種別）として定義し、起動時に一度だけ256エントリの表を
2つ（直接、0xCBプレフィックス）構築します。サイクル数はマシンサイクル単位です。
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from dmg_core.common.exceptions import DecodeError
from dmg_core.transport.bus import Bus

# @intent:constant プレフィックス命令への切り替えを示すエスケープバイト。
PREFIX = 0xCB


class Kind(Enum):
    DIRECT = "DIRECT"
    PREFIXED = "PREFIXED"


# @intent:responsibility 同じディスパッチ規則を共有する命令の分類（閉じた集合）を定義します。
class Family(Enum):
    NOP = "NOP"
    LD_R8_HLR = "LD_R8_HLR"
    LD_A_HLRU = "LD_A_HLRU"
    LD_A_N8R = "LD_A_N8R"
    LD_A_CR = "LD_A_CR"
    LD_A_N16R = "LD_A_N16R"
    LD_A_BCR = "LD_A_BCR"
    LD_A_DER = "LD_A_DER"
    LD_R8_N8 = "LD_R8_N8"
    LD_R16SP_N16 = "LD_R16SP_N16"
    POP_R16 = "POP_R16"
    LD_HLR_R8 = "LD_HLR_R8"
    LD_HLRU_A = "LD_HLRU_A"
    LD_N8R_A = "LD_N8R_A"
    LD_CR_A = "LD_CR_A"
    LD_N16R_A = "LD_N16R_A"
    LD_BCR_A = "LD_BCR_A"
    LD_DER_A = "LD_DER_A"
    LD_HLR_N8 = "LD_HLR_N8"
    LD_N16R_SP = "LD_N16R_SP"
    LD_R8_R8 = "LD_R8_R8"
    LD_SP_HL = "LD_SP_HL"
    PUSH_R16 = "PUSH_R16"
    ADD_A_R8 = "ADD_A_R8"
    ADD_A_N8 = "ADD_A_N8"
    ADD_A_HLR = "ADD_A_HLR"
    INC_R8 = "INC_R8"
    INC_HLR = "INC_HLR"
    INC_R16SP = "INC_R16SP"
    ADD_HL_R16SP = "ADD_HL_R16SP"
    LD_HLSP_S8 = "LD_HLSP_S8"
    SUB_A_R8 = "SUB_A_R8"
    SUB_A_N8 = "SUB_A_N8"
    SUB_A_HLR = "SUB_A_HLR"
    DEC_R8 = "DEC_R8"
    DEC_HLR = "DEC_HLR"
    CP_A_R8 = "CP_A_R8"
    CP_A_N8 = "CP_A_N8"
    CP_A_HLR = "CP_A_HLR"
    DEC_R16SP = "DEC_R16SP"
    AND_A_N8 = "AND_A_N8"
    AND_A_R8 = "AND_A_R8"
    AND_A_HLR = "AND_A_HLR"
    OR_A_R8 = "OR_A_R8"
    OR_A_N8 = "OR_A_N8"
    OR_A_HLR = "OR_A_HLR"
    XOR_A_R8 = "XOR_A_R8"
    XOR_A_N8 = "XOR_A_N8"
    XOR_A_HLR = "XOR_A_HLR"
    CPL = "CPL"
    ROTCA = "ROTCA"
    ROTA = "ROTA"
    ROTC_R8 = "ROTC_R8"
    ROT_R8 = "ROT_R8"
    ROTC_HLR = "ROTC_HLR"
    ROT_HLR = "ROT_HLR"
    SWAP_R8 = "SWAP_R8"
    SWAP_HLR = "SWAP_HLR"
    SLA_R8 = "SLA_R8"
    SRA_R8 = "SRA_R8"
    SRL_R8 = "SRL_R8"
    SLA_HLR = "SLA_HLR"
    SRA_HLR = "SRA_HLR"
    SRL_HLR = "SRL_HLR"
    BIT_U3_R8 = "BIT_U3_R8"
    BIT_U3_HLR = "BIT_U3_HLR"
    CHG_U3_R8 = "CHG_U3_R8"
    CHG_U3_HLR = "CHG_U3_HLR"
    DAA = "DAA"
    SCCF = "SCCF"
    JP_HL = "JP_HL"
    JP_N16 = "JP_N16"
    JP_CC_N16 = "JP_CC_N16"
    JR_E8 = "JR_E8"
    JR_CC_E8 = "JR_CC_E8"
    CALL_N16 = "CALL_N16"
    CALL_CC_N16 = "CALL_CC_N16"
    RST_U3 = "RST_U3"
    RET = "RET"
    RET_CC = "RET_CC"
    EDI = "EDI"
    RETI = "RETI"
    HALT = "HALT"
    STOP = "STOP"


# @intent:responsibility 単一の命令エンコーディングを表す不変の記述子です。
@dataclass(frozen=True)
class Opcode:
    name: str
    kind: Kind
    encoding: int
    family: Family
    total_bytes: int
    cycles: int
    additional_cycles: int = 0

    def __post_init__(self):
        if not 0 <= self.encoding <= 0xFF:
            raise ValueError(f"Opcode {self.name} has invalid encoding {self.encoding!r}.")
        if not 1 <= self.total_bytes <= 3:
            raise ValueError(f"Opcode {self.name} has invalid length {self.total_bytes}.")


# 3ビットのレジスタコード順 (110は(HL))
R8_NAMES = ("B", "C", "D", "E", "H", "L", "HLR", "A")
R16_NAMES = ("BC", "DE", "HL", "SP")
STACK_R16_NAMES = ("BC", "DE", "HL", "AF")
CONDITION_NAMES = ("NZ", "Z", "NC", "C")
HLR = 0b110


def _direct(name: str, encoding: int, family: Family, total_bytes: int, cycles: int,
            additional_cycles: int = 0) -> Opcode:
    return Opcode(name, Kind.DIRECT, encoding, family, total_bytes, cycles, additional_cycles)


def _prefixed(name: str, encoding: int, family: Family, cycles: int) -> Opcode:
    return Opcode(name, Kind.PREFIXED, encoding, family, 2, cycles)


def _register_ops(prefix: str, base: int, family_r8: Family, family_hlr: Family,
                  r8_cycles: int = 1, hlr_cycles: int = 2) -> List[Opcode]:
    """base + rの8命令（rはレジスタコード）を生成します。"""
    ops = []
    for code, reg in enumerate(R8_NAMES):
        if code == HLR:
            ops.append(_direct(f"{prefix}_HLR", base + code, family_hlr, 1, hlr_cycles))
        else:
            ops.append(_direct(f"{prefix}_{reg}", base + code, family_r8, 1, r8_cycles))
    return ops


# @intent:responsibility 直接命令（プレフィックスなし）の記述子を全て生成します。
def _build_direct_opcodes() -> List[Opcode]:
    ops = [
        _direct("NOP", 0x00, Family.NOP, 1, 1),
        _direct("LD_A_HLRI", 0x2A, Family.LD_A_HLRU, 1, 2),
        _direct("LD_A_HLRD", 0x3A, Family.LD_A_HLRU, 1, 2),
        _direct("LD_A_N8R", 0xF0, Family.LD_A_N8R, 2, 3),
        _direct("LD_A_CR", 0xF2, Family.LD_A_CR, 1, 2),
        _direct("LD_A_N16R", 0xFA, Family.LD_A_N16R, 3, 4),
        _direct("LD_A_BCR", 0x0A, Family.LD_A_BCR, 1, 2),
        _direct("LD_A_DER", 0x1A, Family.LD_A_DER, 1, 2),
        _direct("LD_HLRI_A", 0x22, Family.LD_HLRU_A, 1, 2),
        _direct("LD_HLRD_A", 0x32, Family.LD_HLRU_A, 1, 2),
        _direct("LD_N8R_A", 0xE0, Family.LD_N8R_A, 2, 3),
        _direct("LD_CR_A", 0xE2, Family.LD_CR_A, 1, 2),
        _direct("LD_N16R_A", 0xEA, Family.LD_N16R_A, 3, 4),
        _direct("LD_BCR_A", 0x02, Family.LD_BCR_A, 1, 2),
        _direct("LD_DER_A", 0x12, Family.LD_DER_A, 1, 2),
        _direct("LD_HLR_N8", 0x36, Family.LD_HLR_N8, 2, 3),
        _direct("LD_N16R_SP", 0x08, Family.LD_N16R_SP, 3, 5),
        _direct("LD_SP_HL", 0xF9, Family.LD_SP_HL, 1, 2),
        _direct("ADD_A_N8", 0xC6, Family.ADD_A_N8, 2, 2),
        _direct("ADC_A_N8", 0xCE, Family.ADD_A_N8, 2, 2),
        _direct("INC_HLR", 0x34, Family.INC_HLR, 1, 3),
        _direct("ADD_SP_S8", 0xE8, Family.LD_HLSP_S8, 2, 4),
        _direct("LD_HL_SP_S8", 0xF8, Family.LD_HLSP_S8, 2, 3),
        _direct("SUB_A_N8", 0xD6, Family.SUB_A_N8, 2, 2),
        _direct("SBC_A_N8", 0xDE, Family.SUB_A_N8, 2, 2),
        _direct("DEC_HLR", 0x35, Family.DEC_HLR, 1, 3),
        _direct("CP_A_N8", 0xFE, Family.CP_A_N8, 2, 2),
        _direct("AND_A_N8", 0xE6, Family.AND_A_N8, 2, 2),
        _direct("OR_A_N8", 0xF6, Family.OR_A_N8, 2, 2),
        _direct("XOR_A_N8", 0xEE, Family.XOR_A_N8, 2, 2),
        _direct("CPL", 0x2F, Family.CPL, 1, 1),
        _direct("RLCA", 0x07, Family.ROTCA, 1, 1),
        _direct("RRCA", 0x0F, Family.ROTCA, 1, 1),
        _direct("RLA", 0x17, Family.ROTA, 1, 1),
        _direct("RRA", 0x1F, Family.ROTA, 1, 1),
        _direct("DAA", 0x27, Family.DAA, 1, 1),
        _direct("SCF", 0x37, Family.SCCF, 1, 1),
        _direct("CCF", 0x3F, Family.SCCF, 1, 1),
        _direct("JP_HL", 0xE9, Family.JP_HL, 1, 1),
        _direct("JP_N16", 0xC3, Family.JP_N16, 3, 4),
        _direct("JR_E8", 0x18, Family.JR_E8, 2, 3),
        _direct("CALL_N16", 0xCD, Family.CALL_N16, 3, 6),
        _direct("RET", 0xC9, Family.RET, 1, 4),
        _direct("DI", 0xF3, Family.EDI, 1, 1),
        _direct("EI", 0xFB, Family.EDI, 1, 1),
        _direct("RETI", 0xD9, Family.RETI, 1, 4),
        _direct("HALT", 0x76, Family.HALT, 1, 1),
        _direct("STOP", 0x10, Family.STOP, 2, 1),
    ]

    # LD r,r' / LD r,(HL) / LD (HL),r
    for dst_code, dst in enumerate(R8_NAMES):
        for src_code, src in enumerate(R8_NAMES):
            encoding = 0x40 | (dst_code << 3) | src_code
            if dst_code == HLR and src_code == HLR:
                continue  # 0x76 はHALT
            if dst_code == HLR:
                ops.append(_direct(f"LD_HLR_{src}", encoding, Family.LD_HLR_R8, 1, 2))
            elif src_code == HLR:
                ops.append(_direct(f"LD_{dst}_HLR", encoding, Family.LD_R8_HLR, 1, 2))
            else:
                ops.append(_direct(f"LD_{dst}_{src}", encoding, Family.LD_R8_R8, 1, 1))

    # LD r,n8 / INC r / DEC r
    for code, reg in enumerate(R8_NAMES):
        if code == HLR:
            continue
        ops.append(_direct(f"LD_{reg}_N8", 0x06 | (code << 3), Family.LD_R8_N8, 2, 2))
        ops.append(_direct(f"INC_{reg}", 0x04 | (code << 3), Family.INC_R8, 1, 1))
        ops.append(_direct(f"DEC_{reg}", 0x05 | (code << 3), Family.DEC_R8, 1, 1))

    # 16ビット演算とスタック操作
    for code in range(4):
        r16, stack_r16 = R16_NAMES[code], STACK_R16_NAMES[code]
        ops.append(_direct(f"LD_{r16}_N16", 0x01 | (code << 4), Family.LD_R16SP_N16, 3, 3))
        ops.append(_direct(f"INC_{r16}", 0x03 | (code << 4), Family.INC_R16SP, 1, 2))
        ops.append(_direct(f"DEC_{r16}", 0x0B | (code << 4), Family.DEC_R16SP, 1, 2))
        ops.append(_direct(f"ADD_HL_{r16}", 0x09 | (code << 4), Family.ADD_HL_R16SP, 1, 2))
        ops.append(_direct(f"POP_{stack_r16}", 0xC1 | (code << 4), Family.POP_R16, 1, 3))
        ops.append(_direct(f"PUSH_{stack_r16}", 0xC5 | (code << 4), Family.PUSH_R16, 1, 4))

    # 8ビット算術論理演算 (0x80-0xBF)
    ops += _register_ops("ADD_A", 0x80, Family.ADD_A_R8, Family.ADD_A_HLR)
    ops += _register_ops("ADC_A", 0x88, Family.ADD_A_R8, Family.ADD_A_HLR)
    ops += _register_ops("SUB_A", 0x90, Family.SUB_A_R8, Family.SUB_A_HLR)
    ops += _register_ops("SBC_A", 0x98, Family.SUB_A_R8, Family.SUB_A_HLR)
    ops += _register_ops("AND_A", 0xA0, Family.AND_A_R8, Family.AND_A_HLR)
    ops += _register_ops("XOR_A", 0xA8, Family.XOR_A_R8, Family.XOR_A_HLR)
    ops += _register_ops("OR_A", 0xB0, Family.OR_A_R8, Family.OR_A_HLR)
    ops += _register_ops("CP_A", 0xB8, Family.CP_A_R8, Family.CP_A_HLR)

    # 条件付き分岐
    for code, cc in enumerate(CONDITION_NAMES):
        ops.append(_direct(f"JP_{cc}_N16", 0xC2 | (code << 3), Family.JP_CC_N16, 3, 3, 1))
        ops.append(_direct(f"JR_{cc}_E8", 0x20 | (code << 3), Family.JR_CC_E8, 2, 2, 1))
        ops.append(_direct(f"CALL_{cc}_N16", 0xC4 | (code << 3), Family.CALL_CC_N16, 3, 3, 3))
        ops.append(_direct(f"RET_{cc}", 0xC0 | (code << 3), Family.RET_CC, 1, 2, 3))

    for n in range(8):
        ops.append(_direct(f"RST_{n}", 0xC7 | (n << 3), Family.RST_U3, 1, 4))

    return ops


# @intent:responsibility 0xCBプレフィックス命令の記述子を全て生成します。
def _build_prefixed_opcodes() -> List[Opcode]:
    shift_rotate = (
        ("RLC", Family.ROTC_R8, Family.ROTC_HLR),
        ("RRC", Family.ROTC_R8, Family.ROTC_HLR),
        ("RL", Family.ROT_R8, Family.ROT_HLR),
        ("RR", Family.ROT_R8, Family.ROT_HLR),
        ("SLA", Family.SLA_R8, Family.SLA_HLR),
        ("SRA", Family.SRA_R8, Family.SRA_HLR),
        ("SWAP", Family.SWAP_R8, Family.SWAP_HLR),
        ("SRL", Family.SRL_R8, Family.SRL_HLR),
    )
    ops = []
    for row, (prefix, family_r8, family_hlr) in enumerate(shift_rotate):
        for code, reg in enumerate(R8_NAMES):
            encoding = (row << 3) | code
            if code == HLR:
                ops.append(_prefixed(f"{prefix}_HLR", encoding, family_hlr, 4))
            else:
                ops.append(_prefixed(f"{prefix}_{reg}", encoding, family_r8, 2))

    for n in range(8):
        for code, reg in enumerate(R8_NAMES):
            for prefix, base in (("BIT", 0x40), ("RES", 0x80), ("SET", 0xC0)):
                encoding = base | (n << 3) | code
                name = f"{prefix}_{n}_{reg}"
                if prefix == "BIT":
                    if code == HLR:
                        ops.append(_prefixed(name, encoding, Family.BIT_U3_HLR, 3))
                    else:
                        ops.append(_prefixed(name, encoding, Family.BIT_U3_R8, 2))
                elif code == HLR:
                    ops.append(_prefixed(name, encoding, Family.CHG_U3_HLR, 4))
                else:
                    ops.append(_prefixed(name, encoding, Family.CHG_U3_R8, 2))
    return ops


ALL_OPCODES: Tuple[Opcode, ...] = tuple(_build_direct_opcodes() + _build_prefixed_opcodes())


# @intent:responsibility 記述子をエンコーディング位置に配置した256エントリの表を構築します。
# @intent:post-condition 同じ位置に2つの記述子が来た場合はテーブル構築の誤りとしてValueErrorを送出します。
def build_opcode_table(kind: Kind, opcodes=ALL_OPCODES) -> Tuple[Optional[Opcode], ...]:
    table: List[Optional[Opcode]] = [None] * 0x100
    for op in opcodes:
        if op.kind is not kind:
            continue
        if table[op.encoding] is not None:
            raise ValueError(
                f"Opcodes {table[op.encoding].name} and {op.name} share encoding {op.encoding:#04x}."
            )
        table[op.encoding] = op
    return tuple(table)


DIRECT_OPCODE_TABLE = build_opcode_table(Kind.DIRECT)
PREFIXED_OPCODE_TABLE = build_opcode_table(Kind.PREFIXED)

OPCODES_BY_NAME: Dict[str, Opcode] = {op.name: op for op in ALL_OPCODES}


# @intent:responsibility PCの位置の命令をデコードし、記述子を返します。
# @intent:rationale 先頭バイトが0xCBなら次のバイトでプレフィックス表を引きます。
def decode(bus: Bus, pc: int) -> Opcode:
    encoding = bus.read(pc)
    if encoding == PREFIX:
        encoding = bus.read((pc + 1) & 0xFFFF)
        opcode = PREFIXED_OPCODE_TABLE[encoding]
        if opcode is None:
            raise DecodeError(encoding, pc, prefixed=True)
        return opcode
    opcode = DIRECT_OPCODE_TABLE[encoding]
    if opcode is None:
        raise DecodeError(encoding, pc)
    return opcode
