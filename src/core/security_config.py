"""Security configuration constants for the Ascend AI API.

Centralizes the keys redacted from structured logs and the error-response
fields each environment may expose.
"""

# Keys redacted from structured logs. Matching is substring based, so
# "gemini_api_key" is covered by "api_key".
SENSITIVE_KEYS: set[str] = {
    # Authentication & Authorization
    "secret",
    "token",
    "access_token",
    "refresh_token",
    "authorization",
    "api_key",
    "apikey",
    "jwt",
    "session_id",
    "bearer",
    "service_role",
    "code_verifier",
    # Personal Identifiable Information
    "email",
    "phone",
    "address",
    # Anti-abuse identifiers are stored, never logged in full
    "device_fingerprint",
    "fingerprint",
    # Headers
    "set-cookie",
    "cookie",
    "x-api-key",
    "x-goog-api-key",
}

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
