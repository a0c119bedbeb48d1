"""
EasyMock Mock Module

Routing and matching engine behind the mock transport.

This module provides:
- Responders and regex responders
- Replayable response bodies
- Route table with exact and regex resolution
- Match/mismatch statistics
- requests transport adapter and activation switch
"""

from .activation import Activation, default_activation, default_transport
from .body import ReplayableBody
from .matcher import LookupResult, RouteKey, RouteTable, canonical_url, normalize_method
from .metrics import CallRecorder, RecordedCall, RouteStatistics
from .responder import (
    RequestHandler,
    Responder,
    RegexResponder,
    new_responder,
    new_regex_responder,
    new_responder_with_response,
    new_string_responder,
    new_bytes_responder,
    new_json_responder,
    new_xml_responder
)
from .response import (
    CannedResponse,
    build_response,
    new_string_response,
    new_bytes_response,
    new_json_response,
    new_xml_response
)
from .transport import MockConfig, MockTransport

__all__ = [
    # Transport
    'MockTransport',
    'MockConfig',
    'Activation',
    'default_activation',
    'default_transport',

    # Routing
    'RouteKey',
    'RouteTable',
    'LookupResult',
    'canonical_url',
    'normalize_method',

    # Statistics
    'RouteStatistics',
    'CallRecorder',
    'RecordedCall',

    # Responders
    'RequestHandler',
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
    'build_response',
    'new_string_response',
    'new_bytes_response',
    'new_json_response',
    'new_xml_response',
]
