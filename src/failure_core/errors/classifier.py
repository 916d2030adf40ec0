"""
Workflow step failure classification.

Maps whatever a step raised (exception, string, or arbitrary value) to an
ErrorCategory and a retriability verdict. Matching is ordered substring
search on the lower-cased message; the first rule that matches wins, so
messages such as "429 invalid payload" resolve deterministically.
"""

import json
import logging
import traceback
from typing import Any, Optional

from failure_core.types import (
    RETRIABLE_CATEGORIES,
    ErrorCategory,
    ErrorClassification,
)
from failure_core.utils.json_serializers import json_serializer

logger = logging.getLogger(__name__)

UNKNOWN_ERROR_MESSAGE = "Unknown error"

# Evaluated top to bottom. Order matters: provider codes often co-occur with
# loosely worded text ("429 ... invalid", "503 ... not found").
CATEGORY_RULES: tuple[tuple[ErrorCategory, tuple[str, ...]], ...] = (
    (
        ErrorCategory.TIMEOUT,
        ("timeout", "timed out", "etimedout"),
    ),
    (
        ErrorCategory.TRANSIENT_NETWORK,
        (
            "econnreset",
            "econnrefused",
            "enotfound",
            "ehostunreach",
            "network",
            "socket hang up",
        ),
    ),
    (
        ErrorCategory.RATE_LIMIT,
        ("429", "rate limit", "too many requests"),
    ),
    (
        ErrorCategory.PROVIDER_5XX,
        (
            "500",
            "502",
            "503",
            "504",
            "bad gateway",
            "service unavailable",
            "internal server error",
        ),
    ),
    (
        ErrorCategory.PROVIDER_4XX,
        ("401", "403", "404", "forbidden", "unauthorized", "not found"),
    ),
    (
        ErrorCategory.MISSING_CONFIG,
        (
            "missing config",
            "not configured",
            "requires a valid",
            "unknown step type",
        ),
    ),
    (
        ErrorCategory.VALIDATION,
        (
            "validation",
            "invalid",
            "unprocessable",
            "schema",
            "bad request",
            "422",
        ),
    ),
)


def get_error_message(error: Any) -> str:
    """
    Extract a human-readable message from a failure value.

    Resolution order:
    - Exceptions: the ``message`` attribute when it is a string, else
      ``str(error)``, used as-is (an exception raised without a message
      yields "" and classifies as unknown)
    - Non-empty strings: returned unchanged
    - Other values: compact JSON serialization
    - None, empty strings, unserializable values: "Unknown error"

    Never raises.
    """
    if isinstance(error, BaseException):
        try:
            message = getattr(error, "message", None)
            if not isinstance(message, str):
                message = str(error)
        except Exception:
            # Hostile message properties and __str__ hooks
            return UNKNOWN_ERROR_MESSAGE
        return message

    if isinstance(error, str):
        return error or UNKNOWN_ERROR_MESSAGE

    if error is None:
        return UNKNOWN_ERROR_MESSAGE

    try:
        return json.dumps(
            error,
            default=json_serializer,
            separators=(",", ":"),
            ensure_ascii=False,
        )
    except Exception:
        # Cycles, unserializable values and user __str__ hooks all land here
        return UNKNOWN_ERROR_MESSAGE


def get_error_stack(error: Any) -> Optional[str]:
    """Formatted traceback for exception inputs, None for anything else."""
    if not isinstance(error, BaseException):
        return None

    return "".join(
        traceback.format_exception(type(error), error, error.__traceback__)
    )


def categorize_message(message: str) -> ErrorCategory:
    """Apply the ordered rule table to an already-extracted message."""
    normalized = message.lower()
    for category, markers in CATEGORY_RULES:
        if any(marker in normalized for marker in markers):
            return category
    return ErrorCategory.UNKNOWN


def error_category(error: Any) -> ErrorCategory:
    """Classify a failure value into an ErrorCategory."""
    return categorize_message(get_error_message(error))


def is_retriable(error: Any) -> bool:
    """
    Check if a failure should be retried.

    Retriable: timeout, transient_network, rate_limit, provider_5xx.
    Everything else (4xx, config, validation, unknown) goes to dead letter.
    """
    return error_category(error) in RETRIABLE_CATEGORIES


def classify_workflow_error(error: Any) -> ErrorClassification:
    """
    Classify a workflow step failure.

    Args:
        error: Exception, string, or arbitrary value raised by a step

    Returns:
        ErrorClassification with category, message and optional stack
    """
    message = get_error_message(error)
    return ErrorClassification(
        category=categorize_message(message),
        message=message,
        stack=get_error_stack(error),
    )


classify = classify_workflow_error


class WorkflowErrorClassifier:
    """
    Injectable classifier implementing the ErrorClassifier protocol.

    Stateless; a single instance can be shared across worker threads.
    """

    def classify(self, error: Any) -> ErrorClassification:
        classification = classify_workflow_error(error)
        logger.debug(
            "Classified step failure",
            extra={
                "error_category": classification.category.value,
                "retriable": classification.retriable,
            },
        )
        return classification

    def classify_error(self, error: Any) -> ErrorCategory:
        return error_category(error)

    def is_transient(self, error: Any) -> bool:
        return is_retriable(error)


__all__ = [
    "CATEGORY_RULES",
    "UNKNOWN_ERROR_MESSAGE",
    "WorkflowErrorClassifier",
    "categorize_message",
    "classify",
    "classify_workflow_error",
    "error_category",
    "get_error_message",
    "get_error_stack",
    "is_retriable",
]
