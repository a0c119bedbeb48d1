"""
EasyMock Responders

A responder wraps a request handler with an availability flag. Regex
responders add a compiled URL pattern used when exact routing misses.

Responders can be built from:
- a literal string or bytes body
- a JSON-encodable value (Content-Type: application/json)
- an XML-encodable value (Content-Type: application/xml)
- a canned response
- an arbitrary handler for fully dynamic responses
"""

import re
import threading
from typing import Any, Callable, Dict, Optional

import requests

from ..exceptions import InvalidPatternError
from .response import CannedResponse


RequestHandler = Callable[[requests.PreparedRequest], requests.Response]


class Responder:
    """
    Request handler plus an enable/disable switch.

    Availability is independent of registration: a disabled responder stays
    routed, but dispatch to it fails with ``ResponderUnavailableError``.

    Example:
        responder = new_string_responder(200, 'hello')
        register_responder('GET', 'https://example.test/a', responder)

        responder.disable()   # endpoint goes down
        responder.enable()    # and comes back
    """

    def __init__(self, handler: RequestHandler, available: bool = True):
        self._handler = handler
        self._available = available
        self._lock = threading.Lock()

    def handle(self, request: requests.PreparedRequest) -> requests.Response:
        """Invoke the handler; its exceptions propagate unchanged."""
        return self._handler(request)

    def enable(self):
        with self._lock:
            self._available = True

    def disable(self):
        with self._lock:
            self._available = False

    def is_available(self) -> bool:
        with self._lock:
            return self._available

    def __repr__(self) -> str:
        state = 'enabled' if self.is_available() else 'disabled'
        return f"<{type(self).__name__} {state}>"


class RegexResponder:
    """
    Responder matched against a URL pattern instead of an exact URL.

    Composes a ``Responder``: availability and handling are delegated, so
    disabling the wrapped responder disables the regex route too. The
    pattern is compiled once, when the route table binds it at registration.
    """

    def __init__(self, responder: Responder):
        self.responder = responder
        self.pattern: Optional[str] = None
        self.matcher: Optional[re.Pattern] = None

    @classmethod
    def from_handler(cls, handler: RequestHandler) -> 'RegexResponder':
        return cls(Responder(handler))

    def bind(self, pattern: str) -> 'RegexResponder':
        """
        Compile ``pattern`` and attach it to this responder.

        Raises:
            InvalidPatternError: If the pattern does not compile
        """
        try:
            matcher = re.compile(pattern)
        except re.error as e:
            raise InvalidPatternError(pattern, str(e)) from e
        self.pattern = pattern
        self.matcher = matcher
        return self

    def is_matched(self, url: str) -> bool:
        """True if the pattern occurs anywhere in ``url``."""
        if self.matcher is None:
            return False
        return self.matcher.search(url) is not None

    def handle(self, request: requests.PreparedRequest) -> requests.Response:
        return self.responder.handle(request)

    def enable(self):
        self.responder.enable()

    def disable(self):
        self.responder.disable()

    def is_available(self) -> bool:
        return self.responder.is_available()

    def __repr__(self) -> str:
        state = 'enabled' if self.is_available() else 'disabled'
        return f"<RegexResponder {self.pattern!r} {state}>"


def new_responder(handler: RequestHandler) -> Responder:
    """
    Create a responder backed by a custom handler.

    Example:
        books = []

        def add_book(request):
            books.append(json.loads(request.body))
            return new_json_response(200, books)

        responder = new_responder(add_book)
    """
    return Responder(handler)


def new_regex_responder(handler: RequestHandler) -> RegexResponder:
    """Create a regex responder backed by a custom handler."""
    return RegexResponder.from_handler(handler)


def new_responder_with_response(canned: CannedResponse) -> Responder:
    """Create a responder replaying ``canned`` for every request."""
    return Responder(canned.render)


def new_string_responder(status_code: int, body: str, headers: Optional[Dict[str, str]] = None) -> Responder:
    return new_responder_with_response(CannedResponse.from_payload(status_code, body, headers))


def new_bytes_responder(status_code: int, body: bytes, headers: Optional[Dict[str, str]] = None) -> Responder:
    return new_responder_with_response(CannedResponse.from_payload(status_code, body, headers))


def new_json_responder(status_code: int, value: Any, headers: Optional[Dict[str, str]] = None) -> Responder:
    """
    Create a responder serving ``value`` as JSON.

    Raises:
        EncodingError: If the value is not JSON serializable
    """
    return new_responder_with_response(CannedResponse.from_json(status_code, value, headers))


def new_xml_responder(status_code: int, value: Any, headers: Optional[Dict[str, str]] = None) -> Responder:
    """
    Create a responder serving ``value`` as XML.

    Raises:
        EncodingError: If the value has no XML representation
    """
    return new_responder_with_response(CannedResponse.from_xml(status_code, value, headers))
