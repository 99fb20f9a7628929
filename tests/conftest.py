"""
GRAPHWIRE - Test Configuration

Pytest fixtures and configuration for all tests.
"""
import pytest

from di.container import Container, set_default_container
from di.service_locator import ServiceLocator


@pytest.fixture(autouse=True)
def reset_default_container():
    """Every test starts without a process default container."""
    set_default_container(None)
    yield
    set_default_container(None)


@pytest.fixture
def container() -> Container:
    """Fresh, empty container."""
    return Container()


@pytest.fixture
def locator(container: Container) -> ServiceLocator:
    """Service locator bound to the test container, slow-init warning disabled."""
    return ServiceLocator(container, init_warning_timeout=None)
