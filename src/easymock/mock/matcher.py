"""
EasyMock Route Table

Stores registered responders and resolves a (method, URL) pair to one.

Resolution order:
1. Exact match on the route key (O(1) dict probe)
2. Regex routes of any method, in registration order, first available
   match wins (the method only scopes duplicate detection)
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Union

import requests
from requests.exceptions import RequestException

from ..exceptions import DuplicateResponderError
from .responder import Responder, RegexResponder


logger = logging.getLogger("easymock.mock")


class RouteKey(NamedTuple):
    """Identity of a route: upper-case method plus URL (or pattern source)."""

    method: str
    url: str

    def __str__(self) -> str:
        return f"{self.method} {self.url}"


def normalize_method(method: Optional[str], default_method: str = 'GET') -> str:
    """Upper-case an HTTP method; empty means ``default_method``."""
    if not method:
        return default_method.upper()
    return method.upper()


def canonical_url(url: str) -> str:
    """
    Put a URL in the form ``requests`` sends on the wire.

    ``https://example.test`` becomes ``https://example.test/`` and hosts are
    IDNA-encoded. URLs that are not absolute http(s) URLs are returned as-is.
    """
    prepared = requests.PreparedRequest()
    try:
        prepared.prepare_url(url, None)
    except (RequestException, UnicodeError):
        return url
    return prepared.url


@dataclass
class LookupResult:
    """Outcome of resolving a route key."""

    key: RouteKey
    responder: Optional[Union[Responder, RegexResponder]] = None
    found: bool = False
    available: bool = False
    via_regex: bool = False

    @property
    def matched(self) -> bool:
        """True if an available responder was resolved."""
        return self.responder is not None and self.available


class RouteTable:
    """
    Exact and regex responder storage.

    The exact map and the regex map each have their own lock, held only for
    the map access itself. Regex routes keep registration order.

    Example:
        table = RouteTable()
        table.register('GET', 'https://example.test/a', new_string_responder(200, 'hello'))
        table.register_regex('GET', r'https://example.test/items/[0-9]+', items_responder)

        result = table.lookup('GET', 'https://example.test/items/42')
        if result.matched:
            response = result.responder.handle(request)
    """

    def __init__(self, default_method: str = 'GET'):
        self.default_method = default_method
        self._exact: Dict[RouteKey, Responder] = {}
        self._regex: Dict[RouteKey, RegexResponder] = {}
        self._exact_lock = threading.Lock()
        self._regex_lock = threading.Lock()

    def exact_key(self, method: Optional[str], url: str) -> RouteKey:
        return RouteKey(normalize_method(method, self.default_method), canonical_url(url))

    def regex_key(self, method: Optional[str], pattern: str) -> RouteKey:
        return RouteKey(normalize_method(method, self.default_method), pattern)

    def register(self, method: Optional[str], url: str, responder: Responder) -> RouteKey:
        """
        Register ``responder`` for an exact (method, URL) route.

        Raises:
            DuplicateResponderError: If the route already has a responder
        """
        key = self.exact_key(method, url)
        with self._exact_lock:
            if key in self._exact:
                raise DuplicateResponderError(key.method, key.url)
            self._exact[key] = responder

        logger.debug(f"Registered responder: {key}")
        return key

    def register_regex(
        self,
        method: Optional[str],
        pattern: str,
        responder: Union[Responder, RegexResponder]
    ) -> RouteKey:
        """
        Register a responder for every URL matching ``pattern``.

        Plain responders are wrapped in a ``RegexResponder`` sharing their
        availability.

        Raises:
            DuplicateResponderError: If the pattern is already registered for the method
            InvalidPatternError: If the pattern does not compile
        """
        if not isinstance(responder, RegexResponder):
            responder = RegexResponder(responder)
        elif responder.pattern is not None and responder.pattern != pattern:
            # Already bound to another pattern; share the responder, not the pattern
            responder = RegexResponder(responder.responder)

        key = self.regex_key(method, pattern)
        with self._regex_lock:
            if key in self._regex:
                raise DuplicateResponderError(key.method, key.url)
            self._regex[key] = responder.bind(pattern)

        logger.debug(f"Registered regex responder: {key}")
        return key

    def remove(self, method: Optional[str], url: str) -> bool:
        """
        Remove the exact route for ``url`` and the regex route whose pattern
        source is ``url``.

        Returns:
            True if any route was removed
        """
        exact_key = self.exact_key(method, url)
        regex_key = self.regex_key(method, url)

        with self._exact_lock:
            removed_exact = self._exact.pop(exact_key, None) is not None
        with self._regex_lock:
            removed_regex = self._regex.pop(regex_key, None) is not None

        if removed_exact or removed_regex:
            logger.debug(f"Removed responder: {exact_key}")
        return removed_exact or removed_regex

    def lookup(self, method: Optional[str], url: str) -> LookupResult:
        """
        Resolve a request to a responder.

        ``found`` records whether any route matched at all and ``available``
        whether the resolved responder is enabled, so callers can tell an
        unknown URL from a disabled one.
        """
        key = RouteKey(normalize_method(method, self.default_method), url)
        found = False

        with self._exact_lock:
            responder = self._exact.get(key)

        if responder is not None:
            found = True
            if responder.is_available():
                return LookupResult(key, responder, found=True, available=True)

        with self._regex_lock:
            candidates = list(self._regex.values())

        for candidate in candidates:
            if not candidate.is_matched(url):
                continue
            found = True
            if candidate.is_available():
                return LookupResult(key, candidate, found=True, available=True, via_regex=True)

        return LookupResult(key, None, found=found, available=False)

    def routes(self) -> List[RouteKey]:
        """All registered route keys, exact routes first."""
        with self._exact_lock:
            exact = list(self._exact)
        with self._regex_lock:
            regex = list(self._regex)
        return exact + regex

    def clear(self):
        with self._exact_lock:
            self._exact.clear()
        with self._regex_lock:
            self._regex.clear()

    def __len__(self) -> int:
        return len(self.routes())
