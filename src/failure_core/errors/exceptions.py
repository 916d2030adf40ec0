"""
Exception hierarchy for failure_core and for workflow step failures.

Step exceptions carry messages that the classifier routes to
``missing_config``; the library's own errors are limited to configuration
problems since classification and redaction never raise.
"""


class FailureCoreError(Exception):
    """
    Base exception for all failure_core errors.

    Attributes:
        message: Human-readable error description
        cause: Original exception if wrapping
        context: Additional context dict for debugging
    """

    def __init__(
        self,
        message: str,
        cause: Exception | None = None,
        context: dict | None = None,
    ):
        self.message = message
        self.cause = cause
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message]
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(FailureCoreError):
    """Invalid or unreadable failure_core configuration."""

    pass


# =============================================================================
# Workflow Step Errors (raised by step executors)
# =============================================================================


class StepConfigError(FailureCoreError):
    """A step's configuration lacks a required field."""

    def __init__(self, step_type: str, field: str, cause: Exception | None = None):
        message = f"{step_type} step requires a valid {field} in config.{field}"
        super().__init__(message, cause, {"step_type": step_type, "field": field})
        self.step_type = step_type
        self.field = field


class UnknownStepTypeError(FailureCoreError):
    """No executor is registered for the step type."""

    def __init__(self, step_type: str):
        super().__init__(f"Unknown step type: {step_type}", context={"step_type": step_type})
        self.step_type = step_type


__all__ = [
    "FailureCoreError",
    "ConfigurationError",
    "StepConfigError",
    "UnknownStepTypeError",
]
