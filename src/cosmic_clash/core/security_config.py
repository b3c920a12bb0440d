"""Security configuration constants for the Cosmic Clash API.

This module centralizes:
- Keys that should be sanitized from structured logs
- Error response fields permitted per environment
"""

# Keys redacted from structured logs (substring match, case-insensitive)
SENSITIVE_KEYS: set[str] = {
    "api_key",
    "gemini_api_key",
    "x-goog-api-key",
    "x-api-key",
    "authorization",
    "bearer",
    "secret",
    "token",
    "cookie",
    "set-cookie",
}

# Generated artwork (data URIs) is truncated to TRUNCATE_AT characters
TRUNCATED_KEYS: set[str] = {
    "image",
    "image_data",
    "data_uri",
}
TRUNCATE_AT = 64

# Production-only error response fields
PRODUCTION_ERROR_FIELDS: set[str] = {
    "correlation_id",
    "type",
}

# Development error response fields (additional fields allowed in development)
DEVELOPMENT_ERROR_FIELDS: set[str] = PRODUCTION_ERROR_FIELDS | {
    "details",
    "traceback",
    "exception_type",
    "validation_errors",
}


def get_allowed_error_fields(environment: str) -> set[str]:
    """Get allowed error response fields based on environment."""
    if environment == "production":
        return PRODUCTION_ERROR_FIELDS.copy()
    return DEVELOPMENT_ERROR_FIELDS.copy()


def is_sensitive_key(key: str) -> bool:
    """Check if a key should be considered sensitive and redacted."""
    key_lower = key.lower()
    return any(sensitive in key_lower for sensitive in SENSITIVE_KEYS)


def is_truncated_key(key: str) -> bool:
    """Check if a key carries a payload that should be shortened in logs."""
    return key.lower() in TRUNCATED_KEYS
