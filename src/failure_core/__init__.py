"""
failure_core: workflow failure classification and payload redaction.

Consumed by a workflow execution engine to decide retry versus dead-letter
for a failed step, and to keep secrets out of stored failure payloads.

Modules:
    types       - ErrorCategory taxonomy, ErrorClassification, protocols
    errors      - Ordered rule-based classifier and step exceptions
    redaction   - Cycle-safe sensitive-data redaction, idempotency sanitizer
    failures    - Dead-letter record construction
    logging     - Structured JSON logging with workflow context
    config      - YAML configuration with environment overrides

Design Principles:
    - Classification and redaction are total: they never raise
    - No I/O, no shared mutable state in the core paths
    - Redaction never mutates its input
"""

from .types import (
    RETRIABLE_CATEGORIES,
    ErrorCategory,
    ErrorClassification,
    ErrorClassifier,
)
from .errors.classifier import (
    WorkflowErrorClassifier,
    classify,
    classify_workflow_error,
    error_category,
    get_error_message,
    is_retriable,
)
from .redaction import (
    CIRCULAR,
    REDACTED,
    Redactor,
    redact,
    redact_sensitive_data,
    sanitize_idempotency_payload,
)

__version__ = "0.1.0"

__all__ = [
    "CIRCULAR",
    "REDACTED",
    "RETRIABLE_CATEGORIES",
    "ErrorCategory",
    "ErrorClassification",
    "ErrorClassifier",
    "Redactor",
    "WorkflowErrorClassifier",
    "classify",
    "classify_workflow_error",
    "error_category",
    "get_error_message",
    "is_retriable",
    "redact",
    "redact_sensitive_data",
    "sanitize_idempotency_payload",
]
