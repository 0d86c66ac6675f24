import pytest

from stack_monitor.config import Settings


@pytest.fixture
def settings():
    """Default settings with a short connectivity ceiling so timeout tests stay fast."""
    return Settings(connectivity_timeout_seconds=0.2)
