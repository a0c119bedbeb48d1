"""
EasyMock pytest plugin

Fixtures:
- ``mock_transport``: an isolated MockTransport activated process-wide for
  the duration of one test
- ``mock_session``: a ``requests.Session`` routed to ``mock_transport``
"""

import pytest
import requests

from .mock import Activation, MockTransport


@pytest.fixture
def mock_transport():
    """Isolated transport answering every ``requests`` call during the test."""
    activation = Activation(MockTransport())
    activation.activate()
    try:
        yield activation.transport
    finally:
        activation.deactivate()


@pytest.fixture
def mock_session(mock_transport):
    """Session whose http:// and https:// traffic goes to ``mock_transport``."""
    session = requests.Session()
    session.mount('https://', mock_transport)
    session.mount('http://', mock_transport)
    yield session
    session.close()
