"""Context variables for structured logging."""

from contextvars import ContextVar
from typing import Dict, Optional

_workflow_id: ContextVar[str] = ContextVar("workflow_id", default="")
_execution_id: ContextVar[str] = ContextVar("execution_id", default="")
_step_id: ContextVar[str] = ContextVar("step_id", default="")
_organization_id: ContextVar[str] = ContextVar("organization_id", default="")
_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def set_log_context(
    workflow_id: Optional[str] = None,
    execution_id: Optional[str] = None,
    step_id: Optional[str] = None,
    organization_id: Optional[str] = None,
    correlation_id: Optional[str] = None,
) -> None:
    if workflow_id is not None:
        _workflow_id.set(workflow_id)
    if execution_id is not None:
        _execution_id.set(execution_id)
    if step_id is not None:
        _step_id.set(step_id)
    if organization_id is not None:
        _organization_id.set(organization_id)
    if correlation_id is not None:
        _correlation_id.set(correlation_id)


def get_log_context() -> Dict[str, str]:
    return {
        "workflow_id": _workflow_id.get(),
        "execution_id": _execution_id.get(),
        "step_id": _step_id.get(),
        "organization_id": _organization_id.get(),
        "correlation_id": _correlation_id.get(),
    }


def clear_log_context() -> None:
    _workflow_id.set("")
    _execution_id.set("")
    _step_id.set("")
    _organization_id.set("")
    _correlation_id.set("")
