"""
Verification tokens: short-lived single-use secrets for email
verification, password reset and two-factor flows.
"""
