import pytest
import structlog

from eventroute import Registry
from tests import sample_handlers


@pytest.fixture(autouse=True)
def reset_logging():
    """Each test starts from structlog defaults."""
    structlog.reset_defaults()
    yield
    structlog.reset_defaults()


@pytest.fixture
def registry():
    return Registry()


@pytest.fixture(autouse=True)
def clear_seen():
    sample_handlers.seen.clear()
    yield
    sample_handlers.seen.clear()
