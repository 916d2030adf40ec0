"""
Error classification and exception hierarchy.

Provides:
- Ordered rule-based classification of workflow step failures
- Message and stack extraction for arbitrary failure values
- Exceptions raised by step executors and by configuration loading
"""

from failure_core.errors.classifier import (
    # Constants
    CATEGORY_RULES,
    UNKNOWN_ERROR_MESSAGE,
    # Classes
    WorkflowErrorClassifier,
    # Functions
    categorize_message,
    classify,
    classify_workflow_error,
    error_category,
    get_error_message,
    get_error_stack,
    is_retriable,
)
from failure_core.errors.exceptions import (
    ConfigurationError,
    FailureCoreError,
    StepConfigError,
    UnknownStepTypeError,
)

__all__ = [
    # Base classes
    "FailureCoreError",
    "ConfigurationError",
    # Step errors
    "StepConfigError",
    "UnknownStepTypeError",
    # Classification
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
