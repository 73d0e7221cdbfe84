"""
dmg_core: SM83 (DMG) CPUコアと共通バスのエミュレーション。
"""
__version__ = "0.1.0"
