"""
Core types and protocols used across modules.

This module provides the error taxonomy, the classification record and the
protocol definitions shared by the classifier, the dead-letter record
builder and the logging helpers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Protocol


class ErrorCategory(str, Enum):
    """
    Classification of workflow step failures for retry decisions.

    Member order is the matching precedence used by the classifier:
    the first category whose markers appear in the message wins.

    Categories:
        TIMEOUT: Operation exceeded its deadline (retriable)
        TRANSIENT_NETWORK: Connection resets, DNS failures (retriable)
        RATE_LIMIT: Provider throttling, HTTP 429 (retriable)
        PROVIDER_5XX: Provider-side server failures (retriable)
        PROVIDER_4XX: Client-side rejections, 401/403/404 (not retriable)
        MISSING_CONFIG: Step is misconfigured (not retriable)
        VALIDATION: Payload rejected as invalid (not retriable)
        UNKNOWN: Nothing matched (not retriable)
    """

    TIMEOUT = "timeout"
    TRANSIENT_NETWORK = "transient_network"
    RATE_LIMIT = "rate_limit"
    PROVIDER_5XX = "provider_5xx"
    PROVIDER_4XX = "provider_4xx"
    MISSING_CONFIG = "missing_config"
    VALIDATION = "validation"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


RETRIABLE_CATEGORIES = frozenset(
    {
        ErrorCategory.TIMEOUT,
        ErrorCategory.TRANSIENT_NETWORK,
        ErrorCategory.RATE_LIMIT,
        ErrorCategory.PROVIDER_5XX,
    }
)

NON_RETRIABLE_CATEGORIES = frozenset(
    {
        ErrorCategory.PROVIDER_4XX,
        ErrorCategory.MISSING_CONFIG,
        ErrorCategory.VALIDATION,
        ErrorCategory.UNKNOWN,
    }
)


@dataclass(frozen=True)
class ErrorClassification:
    """
    Result of classifying a step failure.

    Attributes:
        category: Taxonomy category
        message: Human-readable message extracted from the failure
        stack: Formatted traceback, only for exception inputs
    """

    category: ErrorCategory
    message: str
    stack: Optional[str] = None

    @property
    def retriable(self) -> bool:
        return self.category in RETRIABLE_CATEGORIES

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "retriable": self.retriable,
            "message": self.message,
            "stack": self.stack,
        }


class ErrorClassifier(Protocol):
    """
    Protocol for error classification implementations.

    The workflow engine depends on this protocol rather than on the
    concrete classifier so alternative taxonomies can be injected.
    """

    def classify(self, error: Any) -> ErrorClassification:
        """
        Classify a failure value.

        Args:
            error: Exception, string, or arbitrary value raised by a step

        Returns:
            ErrorClassification for the failure
        """
        ...

    def classify_error(self, error: Any) -> ErrorCategory:
        """
        Classify a failure into an error category.

        Args:
            error: Failure value to classify

        Returns:
            ErrorCategory indicating how to handle this error
        """
        ...

    def is_transient(self, error: Any) -> bool:
        """
        Check if failure is retriable.

        Args:
            error: Failure value to check

        Returns:
            True if error may succeed on retry
        """
        ...


__all__ = [
    "ErrorCategory",
    "ErrorClassification",
    "ErrorClassifier",
    "RETRIABLE_CATEGORIES",
    "NON_RETRIABLE_CATEGORIES",
]
