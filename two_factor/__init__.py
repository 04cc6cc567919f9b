"""
Two-factor authentication: TOTP codes with single-use backup codes.
"""
