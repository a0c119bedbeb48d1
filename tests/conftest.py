"""
Shared fixtures for EasyMock tests.
"""

import pytest
import requests

import easymock
from easymock.mock import MockTransport

pytest_plugins = ["easymock.pytest_plugin"]


@pytest.fixture(autouse=True)
def clean_default_transport():
    """Leave the process-wide transport inactive and empty after every test."""
    yield
    easymock.shutdown()
    easymock.reset()


@pytest.fixture
def transport():
    """Fresh, unactivated transport."""
    return MockTransport()


@pytest.fixture
def session(transport):
    """Session with http:// and https:// mounted on ``transport``."""
    s = requests.Session()
    s.mount('https://', transport)
    s.mount('http://', transport)
    yield s
    s.close()
