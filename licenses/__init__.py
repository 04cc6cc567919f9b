"""
Licenses module - License generation and lifecycle.

This module handles:
- License key generation and hardware fingerprints
- License entity and validation rules
- License lifecycle (issue, validate, bind, revoke, extend, reactivate, expire)
"""
