"""
EasyMock

Deterministic, in-process replacement for the ``requests`` transport in
automated tests. Register (method, URL) routes with canned or generated
responses; matching requests are answered locally, with no network I/O.

Example:
    import easymock

    easymock.start()
    easymock.register_responder('GET', 'https://example.test/a',
                                easymock.new_string_responder(200, 'hello'))

    requests.get('https://example.test/a').text            # 'hello'
    easymock.matched_count('GET', 'https://example.test/a')  # 1

    easymock.shutdown()

The module-level functions operate on one process-wide transport. Tests that
need isolation can build their own ``MockTransport`` and ``Activation``.
"""

from typing import Optional, Union

import requests

from .exceptions import (
    EasyMockError,
    ConfigurationError,
    DuplicateResponderError,
    InvalidPatternError,
    FixtureError,
    EncodingError,
    RoutingError,
    NoResponderError,
    ResponderUnavailableError
)
from .mock import (
    Activation,
    MockConfig,
    MockTransport,
    RouteKey,
    ReplayableBody,
    CannedResponse,
    Responder,
    RegexResponder,
    default_activation,
    default_transport,
    new_responder,
    new_regex_responder,
    new_responder_with_response,
    new_string_responder,
    new_bytes_responder,
    new_json_responder,
    new_xml_responder,
    new_string_response,
    new_bytes_response,
    new_json_response,
    new_xml_response
)
from .fixtures import FixtureLoader, load_fixtures, transport_from_fixtures


def start():
    """Serve every ``requests`` call in the process from the default transport."""
    default_activation.activate()


def start_with_client(client: requests.Session):
    """Serve one session's requests from the default transport."""
    default_activation.activate_client(client)


def shutdown():
    """Restore the original transport everywhere; safe to call repeatedly."""
    default_activation.deactivate()


def reset():
    """Drop all routes and counters of the default transport."""
    default_transport.reset()


def register_responder(method: Optional[str], url: str, responder: Responder) -> RouteKey:
    return default_transport.register_responder(method, url, responder)


def register_regex_responder(
    method: Optional[str],
    pattern: str,
    responder: Union[Responder, RegexResponder]
) -> RouteKey:
    return default_transport.register_regex_responder(method, pattern, responder)


def remove_responder(method: Optional[str], url: str) -> bool:
    return default_transport.remove_responder(method, url)


def matched_count(method: Optional[str], url: str) -> int:
    return default_transport.matched_count(method, url)


def mismatched_count(method: Optional[str], url: str) -> int:
    return default_transport.mismatched_count(method, url)


def total_count() -> int:
    return default_transport.total_count


__all__ = [
    # Activation
    'start',
    'start_with_client',
    'shutdown',
    'reset',
    'Activation',
    'default_activation',
    'default_transport',

    # Registration
    'register_responder',
    'register_regex_responder',
    'remove_responder',
    'load_fixtures',
    'transport_from_fixtures',
    'FixtureLoader',

    # Statistics
    'matched_count',
    'mismatched_count',
    'total_count',

    # Transport
    'MockTransport',
    'MockConfig',
    'RouteKey',

    # Responders
    'Responder',
    'RegexResponder',
    'new_responder',
    'new_regex_responder',
    'new_responder_with_response',
    'new_string_responder',
    'new_bytes_responder',
    'new_json_responder',
    'new_xml_responder',

    # Responses
    'ReplayableBody',
    'CannedResponse',
    'new_string_response',
    'new_bytes_response',
    'new_json_response',
    'new_xml_response',

    # Errors
    'EasyMockError',
    'ConfigurationError',
    'DuplicateResponderError',
    'InvalidPatternError',
    'FixtureError',
    'EncodingError',
    'RoutingError',
    'NoResponderError',
    'ResponderUnavailableError',
]

__version__ = '1.0.0'
