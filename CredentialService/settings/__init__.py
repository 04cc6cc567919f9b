"""
Settings for the credential service.

Pick one with DJANGO_SETTINGS_MODULE:
- base: shared by every environment (license, token and 2FA knobs live here)
- dev: local development, console email, optional SQLite
- test: in-memory SQLite, LocMem cache, captured email, eager Celery
- prod: secrets from the environment, file logging
"""
