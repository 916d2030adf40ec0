"""Logging utility functions."""

import logging
from typing import Any

from failure_core.errors.classifier import classify_workflow_error

MAX_ERROR_MESSAGE_LENGTH = 500

# Reserved LogRecord attribute names that cannot be used in extra dict
_RESERVED_LOG_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "asctime",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "message",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


def log_with_context(
    logger: logging.Logger,
    level: int,
    msg: str,
    **kwargs: Any,
) -> None:
    """
    Log with structured context fields.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        msg: Log message
        **kwargs: Additional context fields (step_type, attempt, etc.)
                  Note: exc_info=True is supported and handled specially.

    Example:
        log_with_context(
            logger, logging.WARNING, "Retry scheduled",
            step_type="send_message",
            attempt=2,
            delay_ms=4000,
        )
    """
    exc_info = kwargs.pop("exc_info", None)

    extra = {k: v for k, v in kwargs.items() if k not in _RESERVED_LOG_KEYS}

    logger.log(level, msg, exc_info=exc_info, extra=extra)


def truncate_message(message: str, limit: int = MAX_ERROR_MESSAGE_LENGTH) -> str:
    if len(message) > limit:
        return message[:limit] + "..."
    return message


def log_exception(
    logger: logging.Logger,
    exc: BaseException,
    msg: str,
    level: int = logging.ERROR,
    include_traceback: bool = True,
    **kwargs: Any,
) -> None:
    """
    Log a step failure with its classification.

    Attaches ``error_category`` and ``retriable`` from the classifier unless
    the caller supplied a category, and truncates long error messages.

    Args:
        logger: Logger instance
        exc: Exception to log
        msg: Context message
        level: Log level (default: ERROR)
        include_traceback: Include full traceback (default: True)
        **kwargs: Additional context fields

    Example:
        try:
            execute_step(step)
        except Exception as e:
            log_exception(logger, e, "Step failed", step_type=step.type)
    """
    classification = classify_workflow_error(exc)
    if kwargs.get("error_category") is None:
        kwargs["error_category"] = classification.category.value
        kwargs["retriable"] = classification.retriable

    kwargs["error_message"] = truncate_message(classification.message)

    extra = {k: v for k, v in kwargs.items() if k not in _RESERVED_LOG_KEYS}

    if include_traceback:
        logger.log(level, msg, exc_info=exc, extra=extra)
    else:
        logger.log(level, msg, extra=extra)
