"""
pytest configuration for failure_core tests.

Adds src directory to Python path for imports and isolates process-wide
state (logging context, config singleton) between tests.
"""

import sys
from pathlib import Path

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from failure_core.config import reset_config  # noqa: E402
from failure_core.logging.context import clear_log_context  # noqa: E402


@pytest.fixture(autouse=True)
def isolate_global_state():
    clear_log_context()
    reset_config()
    yield
    clear_log_context()
    reset_config()
