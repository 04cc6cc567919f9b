"""
Shared kernel for the credential service.

Holds the exception taxonomy, value objects and domain events, the audit
and notification ports with their Django adapters, rate limiting, metrics
and the periodic maintenance jobs.
"""
