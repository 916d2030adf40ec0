"""
Dead-letter record construction for failed workflow steps.

Combines a failure classification with redacted snapshots of the step's
input and configuration. Persisting the record, scheduling retries and
replaying dead-lettered steps belong to the workflow engine.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from failure_core.errors.classifier import classify_workflow_error
from failure_core.redaction.redactor import Redactor, redact_sensitive_data
from failure_core.types import ErrorCategory, ErrorClassification

logger = logging.getLogger(__name__)


class DeadLetterRecord(BaseModel):
    """Schema for a workflow step moved to the dead-letter queue.

    Attributes:
        step_type: Type of the failed step (e.g., send_message, http_call)
        failure_reason: Classified failure message
        error_stack: Formatted traceback when the failure was an exception
        error_category: Classification category value
        retriable: Whether the category was retriable (exhausted retries)
        attempt_count: Number of attempts made, including the last one
        input_payload: Redacted step input
        step_config_snapshot: Redacted step configuration
        correlation_id: Correlation ID of the execution, if any
        first_failed_at: Timestamp of the first failed attempt
        last_failed_at: Timestamp of the final failed attempt

    Example:
        >>> record = build_dead_letter_record(
        ...     ValueError("validation failed: invalid payload"),
        ...     step_type="http_call",
        ...     input_payload={"url": "https://example.com", "api_key": "k"},
        ...     step_config_snapshot={"method": "POST"},
        ... )
        >>> record.error_category
        'validation'
        >>> record.input_payload["api_key"]
        '[REDACTED]'
    """

    step_type: str = Field(
        ...,
        description="Type of the failed step",
        min_length=1,
    )
    failure_reason: str = Field(
        ...,
        description="Classified failure message",
    )
    error_stack: Optional[str] = Field(
        default=None,
        description="Formatted traceback when the failure was an exception",
    )
    error_category: ErrorCategory = Field(
        ...,
        description="Classification category",
    )
    retriable: bool = Field(
        ...,
        description="Whether the failure category is retriable",
    )
    attempt_count: int = Field(
        default=1,
        description="Number of attempts made",
        ge=1,
    )
    input_payload: Any = Field(
        default=None,
        description="Redacted step input",
    )
    step_config_snapshot: Any = Field(
        default=None,
        description="Redacted step configuration",
    )
    correlation_id: Optional[str] = Field(
        default=None,
        description="Correlation ID of the workflow execution",
    )
    first_failed_at: datetime = Field(
        ...,
        description="Timestamp of the first failed attempt",
    )
    last_failed_at: datetime = Field(
        ...,
        description="Timestamp of the final failed attempt",
    )

    model_config = {"use_enum_values": True}

    @field_validator("step_type")
    @classmethod
    def validate_step_type(cls, v: str) -> str:
        """Ensure step_type is not whitespace-only."""
        if not v.strip():
            raise ValueError("step_type cannot be empty or whitespace")
        return v.strip()

    @field_serializer("first_failed_at", "last_failed_at")
    def serialize_timestamp(self, timestamp: datetime) -> str:
        """Serialize datetime to ISO 8601 format."""
        return timestamp.isoformat()


def should_retry(
    classification: ErrorClassification,
    attempt: int,
    max_retries: int,
) -> bool:
    """
    Decide between scheduling a retry and dead-lettering.

    Args:
        classification: Classification of the latest failure
        attempt: Attempt number that just failed (1-based)
        max_retries: Retry budget for the step

    Returns:
        True if the step should be retried
    """
    return classification.retriable and attempt <= max_retries


def build_dead_letter_record(
    error: Any,
    *,
    step_type: str,
    input_payload: Any = None,
    step_config_snapshot: Any = None,
    attempt_count: int = 1,
    correlation_id: Optional[str] = None,
    first_failed_at: Optional[datetime] = None,
    last_failed_at: Optional[datetime] = None,
    redactor: Optional[Redactor] = None,
) -> DeadLetterRecord:
    """
    Build the dead-letter record for a failed step.

    Both payloads are redacted before they reach the record; the caller's
    objects are left untouched.

    Args:
        error: Failure value raised by the step
        step_type: Type of the failed step
        input_payload: Step input (redacted)
        step_config_snapshot: Step configuration (redacted)
        attempt_count: Number of attempts made
        correlation_id: Execution correlation ID
        first_failed_at: First failure time (defaults to last_failed_at)
        last_failed_at: Final failure time (defaults to now, UTC)
        redactor: Custom redactor; defaults to the standard key patterns

    Returns:
        DeadLetterRecord ready for persistence
    """
    classification = classify_workflow_error(error)
    redact = redactor.redact if redactor is not None else redact_sensitive_data

    now = last_failed_at or datetime.now(timezone.utc)

    record = DeadLetterRecord(
        step_type=step_type,
        failure_reason=classification.message,
        error_stack=classification.stack,
        error_category=classification.category,
        retriable=classification.retriable,
        attempt_count=attempt_count,
        input_payload=redact(input_payload),
        step_config_snapshot=redact(step_config_snapshot),
        correlation_id=correlation_id,
        first_failed_at=first_failed_at or now,
        last_failed_at=now,
    )

    logger.debug(
        "Built dead-letter record",
        extra={
            "step_type": record.step_type,
            "error_category": record.error_category,
            "attempt": attempt_count,
            "correlation_id": correlation_id,
        },
    )
    return record


__all__ = [
    "DeadLetterRecord",
    "build_dead_letter_record",
    "should_retry",
]
