"""
SM83 命令マッピング定義。
各命令モジュールから関数をインポートし、命令ファミリーと実行関数の対応表を構築します。
"""
from dmg_core.arch.sm83.opcodes import Family
from . import alu, control, load

EXECUTE_MAP = {
    # Load
    Family.LD_R8_HLR: load.execute_ld_r8_hlr,
    Family.LD_A_HLRU: load.execute_ld_a_hlru,
    Family.LD_A_N8R: load.execute_ld_a_n8r,
    Family.LD_A_CR: load.execute_ld_a_cr,
    Family.LD_A_N16R: load.execute_ld_a_n16r,
    Family.LD_A_BCR: load.execute_ld_a_bcr,
    Family.LD_A_DER: load.execute_ld_a_der,
    Family.LD_R8_N8: load.execute_ld_r8_n8,
    Family.LD_R16SP_N16: load.execute_ld_r16sp_n16,
    Family.POP_R16: load.execute_pop_r16,
    # Store
    Family.LD_HLR_R8: load.execute_ld_hlr_r8,
    Family.LD_HLRU_A: load.execute_ld_hlru_a,
    Family.LD_N8R_A: load.execute_ld_n8r_a,
    Family.LD_CR_A: load.execute_ld_cr_a,
    Family.LD_N16R_A: load.execute_ld_n16r_a,
    Family.LD_BCR_A: load.execute_ld_bcr_a,
    Family.LD_DER_A: load.execute_ld_der_a,
    Family.LD_HLR_N8: load.execute_ld_hlr_n8,
    Family.LD_N16R_SP: load.execute_ld_n16r_sp,
    Family.PUSH_R16: load.execute_push_r16,
    # Move
    Family.LD_R8_R8: load.execute_ld_r8_r8,
    Family.LD_SP_HL: load.execute_ld_sp_hl,
    # Add
    Family.ADD_A_R8: alu.execute_add_a_r8,
    Family.ADD_A_N8: alu.execute_add_a_n8,
    Family.ADD_A_HLR: alu.execute_add_a_hlr,
    Family.INC_R8: alu.execute_inc_r8,
    Family.INC_HLR: alu.execute_inc_hlr,
    Family.INC_R16SP: alu.execute_inc_r16sp,
    Family.ADD_HL_R16SP: alu.execute_add_hl_r16sp,
    Family.LD_HLSP_S8: alu.execute_ld_hlsp_s8,
    # Subtract / compare
    Family.SUB_A_R8: alu.execute_sub_a_r8,
    Family.SUB_A_N8: alu.execute_sub_a_n8,
    Family.SUB_A_HLR: alu.execute_sub_a_hlr,
    Family.DEC_R8: alu.execute_dec_r8,
    Family.DEC_HLR: alu.execute_dec_hlr,
    Family.CP_A_R8: alu.execute_cp_a_r8,
    Family.CP_A_N8: alu.execute_cp_a_n8,
    Family.CP_A_HLR: alu.execute_cp_a_hlr,
    Family.DEC_R16SP: alu.execute_dec_r16sp,
    # And, or, xor, complement
    Family.AND_A_N8: alu.execute_and_a_n8,
    Family.AND_A_R8: alu.execute_and_a_r8,
    Family.AND_A_HLR: alu.execute_and_a_hlr,
    Family.OR_A_R8: alu.execute_or_a_r8,
    Family.OR_A_N8: alu.execute_or_a_n8,
    Family.OR_A_HLR: alu.execute_or_a_hlr,
    Family.XOR_A_R8: alu.execute_xor_a_r8,
    Family.XOR_A_N8: alu.execute_xor_a_n8,
    Family.XOR_A_HLR: alu.execute_xor_a_hlr,
    Family.CPL: alu.execute_cpl,
    # Rotate, shift
    Family.ROTCA: alu.execute_rotca,
    Family.ROTA: alu.execute_rota,
    Family.ROTC_R8: alu.execute_rotc_r8,
    Family.ROT_R8: alu.execute_rot_r8,
    Family.ROTC_HLR: alu.execute_rotc_hlr,
    Family.ROT_HLR: alu.execute_rot_hlr,
    Family.SWAP_R8: alu.execute_swap_r8,
    Family.SWAP_HLR: alu.execute_swap_hlr,
    Family.SLA_R8: alu.execute_sla_r8,
    Family.SRA_R8: alu.execute_sra_r8,
    Family.SRL_R8: alu.execute_srl_r8,
    Family.SLA_HLR: alu.execute_sla_hlr,
    Family.SRA_HLR: alu.execute_sra_hlr,
    Family.SRL_HLR: alu.execute_srl_hlr,
    # Bit test and set
    Family.BIT_U3_R8: alu.execute_bit_u3_r8,
    Family.BIT_U3_HLR: alu.execute_bit_u3_hlr,
    Family.CHG_U3_R8: alu.execute_chg_u3_r8,
    Family.CHG_U3_HLR: alu.execute_chg_u3_hlr,
    # Misc. ALU
    Family.DAA: alu.execute_daa,
    Family.SCCF: alu.execute_sccf,
    # Jumps, calls, returns
    Family.NOP: control.execute_nop,
    Family.JP_HL: control.execute_jp_hl,
    Family.JP_N16: control.execute_jp_n16,
    Family.JP_CC_N16: control.execute_jp_cc_n16,
    Family.JR_E8: control.execute_jr_e8,
    Family.JR_CC_E8: control.execute_jr_cc_e8,
    Family.CALL_N16: control.execute_call_n16,
    Family.CALL_CC_N16: control.execute_call_cc_n16,
    Family.RST_U3: control.execute_rst_u3,
    Family.RET: control.execute_ret,
    Family.RET_CC: control.execute_ret_cc,
    # Interrupts, misc. control
    Family.EDI: control.execute_edi,
    Family.RETI: control.execute_reti,
    Family.HALT: control.execute_halt,
    Family.STOP: control.execute_stop,
}
