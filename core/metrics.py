"""
Prometheus metrics for the credential service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter

# License metrics
licenses_issued_total = Counter(
    "licenses_issued_total",
    "Total licenses issued",
    ["product_id"],
)

license_validations_total = Counter(
    "license_validations_total",
    "Total license validations by outcome",
    ["outcome"],
)

licenses_revoked_total = Counter(
    "licenses_revoked_total",
    "Total licenses revoked",
)

licenses_expired_total = Counter(
    "licenses_expired_total",
    "Total licenses moved to expired",
    ["trigger"],
)

license_key_conflicts_total = Counter(
    "license_key_conflicts_total",
    "Generated license keys rejected as duplicates",
)

# Verification token metrics
verification_tokens_issued_total = Counter(
    "verification_tokens_issued_total",
    "Total verification tokens issued",
    ["token_type"],
)

verification_token_redemptions_total = Counter(
    "verification_token_redemptions_total",
    "Total verification token redemptions by outcome",
    ["token_type", "outcome"],
)

# Two-factor metrics
two_factor_verifications_total = Counter(
    "two_factor_verifications_total",
    "Total two-factor verifications by mechanism and outcome",
    ["mechanism", "outcome"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)

# Rate limiting metrics
rate_limit_rejections_total = Counter(
    "rate_limit_rejections_total",
    "Requests rejected by the rate limiter",
    ["path_prefix"],
)
