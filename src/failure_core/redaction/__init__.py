"""
Redaction of sensitive data in failure payloads.

Provides the general-purpose redactor used for dead-letter snapshots and
log payloads, and the idempotency sanitizer that additionally masks phone
numbers.
"""

from failure_core.redaction.idempotency import sanitize_idempotency_payload
from failure_core.redaction.redactor import (
    CIRCULAR,
    MASKED_PHONE,
    REDACTED,
    SENSITIVE_KEY_PATTERNS,
    Redactor,
    is_record_object,
    is_sensitive_key,
    mask_phone_number,
    redact,
    redact_sensitive_data,
)

__all__ = [
    # Sentinels
    "REDACTED",
    "CIRCULAR",
    "MASKED_PHONE",
    "SENSITIVE_KEY_PATTERNS",
    # Redaction
    "Redactor",
    "is_record_object",
    "is_sensitive_key",
    "redact",
    "redact_sensitive_data",
    # Idempotency
    "mask_phone_number",
    "sanitize_idempotency_payload",
]
