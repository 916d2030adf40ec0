"""Sanitization of cached idempotency responses."""

from typing import Any

from failure_core.redaction.redactor import Redactor

_idempotency_redactor = Redactor(
    mask_phone_numbers=True,
    mapping_types=(dict,),
    descend_objects=False,
)


def sanitize_idempotency_payload(value: Any) -> Any:
    """
    Redact credentials and mask phone numbers in a payload before caching.

    Only plain dicts are descended into; other objects are stored as-is.
    ``None`` stays ``None``.
    """
    if value is None:
        return None

    return _idempotency_redactor.redact(value)


__all__ = ["sanitize_idempotency_payload"]
