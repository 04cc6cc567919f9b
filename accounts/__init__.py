"""
Accounts module - User accounts and their embedded security state.

This module handles:
- UserAccount entity
- Two-factor credential storage (flag, secret, backup codes)
- Effects authorized by verification tokens (email confirmation, password reset)
"""
