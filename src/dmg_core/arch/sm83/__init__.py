"""
SM83 Architecture Package
"""
