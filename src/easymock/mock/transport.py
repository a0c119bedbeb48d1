"""
EasyMock Transport

``requests`` transport adapter that answers requests from registered
responders instead of the network.

Features:
- Exact (method, URL) routing with regex fallback
- Per-responder availability (simulate an endpoint going down)
- Per-route match/mismatch counters and a grand total
- Optional recording of dispatched requests
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import requests
from requests.adapters import BaseAdapter

from ..exceptions import NoResponderError, ResponderUnavailableError
from .matcher import RouteKey, RouteTable
from .metrics import CallRecorder, RecordedCall, RouteStatistics
from .response import bind_request
from .responder import Responder, RegexResponder


@dataclass
class MockConfig:
    """Configuration for mock transport behavior."""

    # Logging
    log_level: Optional[str] = None  # None leaves the "easymock.mock" logger level alone

    # Routing
    default_method: str = "GET"  # Used when a request carries no method

    # Request recording
    recording_enabled: bool = False  # Keep a history of dispatched requests
    recording_limit: int = 1000  # Maximum number of requests to record (0 = unlimited)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MockConfig':
        """Create config from dictionary, ignoring unknown keys."""
        defaults = cls()
        return cls(
            log_level=data.get('log_level', defaults.log_level),
            default_method=data.get('default_method', defaults.default_method),
            recording_enabled=bool(data.get('recording_enabled', defaults.recording_enabled)),
            recording_limit=int(data.get('recording_limit', defaults.recording_limit))
        )


class MockTransport(BaseAdapter):
    """
    Transport adapter serving registered responders.

    Mount it on a session directly, or activate it process-wide through
    ``easymock.start()``.

    Example:
        transport = MockTransport()
        transport.register_responder('GET', 'https://example.test/a',
                                     new_string_responder(200, 'hello'))

        session = requests.Session()
        session.mount('https://', transport)
        session.get('https://example.test/a').text   # 'hello'
        transport.matched_count('GET', 'https://example.test/a')   # 1
    """

    def __init__(self, config: Optional[MockConfig] = None):
        super().__init__()
        self.config = config or MockConfig()

        self.logger = logging.getLogger("easymock.mock")
        if self.config.log_level:
            # The logger is shared by every transport; the last configured level wins
            self.logger.setLevel(getattr(logging, self.config.log_level.upper()))

        # Held by reset and by dispatch bookkeeping, never while a handler runs
        self._state_lock = threading.Lock()

        self.routes = RouteTable(default_method=self.config.default_method)
        self.stats = RouteStatistics(default_method=self.config.default_method)
        self.recorder = CallRecorder(limit=self.config.recording_limit)

    # Registration

    def register_responder(self, method: Optional[str], url: str, responder: Responder) -> RouteKey:
        """
        Register a responder for an exact (method, URL) route.

        Raises:
            DuplicateResponderError: If the route already has a responder
        """
        return self.routes.register(method, url, responder)

    def register_regex_responder(
        self,
        method: Optional[str],
        pattern: str,
        responder: Union[Responder, RegexResponder]
    ) -> RouteKey:
        """
        Register a responder for URLs matching ``pattern``.

        Raises:
            DuplicateResponderError: If the pattern is already registered for the method
            InvalidPatternError: If the pattern does not compile
        """
        return self.routes.register_regex(method, pattern, responder)

    def remove_responder(self, method: Optional[str], url: str) -> bool:
        return self.routes.remove(method, url)

    # Statistics

    def matched_count(self, method: Optional[str], url: str) -> int:
        return self.stats.matched_count(method, url)

    def mismatched_count(self, method: Optional[str], url: str) -> int:
        return self.stats.mismatched_count(method, url)

    @property
    def total_count(self) -> int:
        return self.stats.total_count

    @property
    def calls(self) -> List[RecordedCall]:
        """Recorded dispatches, oldest first (empty unless recording is enabled)."""
        return self.recorder.calls

    def reset(self):
        """Drop every route, counter and recorded call as one step."""
        with self._state_lock:
            self.routes.clear()
            self.stats.reset()
            self.recorder.clear()
        self.logger.debug("Mock transport reset")

    # Dispatch

    def dispatch(self, request: requests.PreparedRequest) -> requests.Response:
        """
        Answer one request from the registered responders.

        Args:
            request: Outgoing prepared request

        Returns:
            The responder's response

        Raises:
            NoResponderError: If no route matches the request
            ResponderUnavailableError: If matching routes exist but are disabled
        """
        url = request.url
        with self._state_lock:
            self.stats.record_request()
            result = self.routes.lookup(request.method, url)
            key = result.key
            if result.matched:
                self.stats.record_match(key)
            else:
                self.stats.record_mismatch(key)
                if result.found:
                    error = ResponderUnavailableError(key.method, url, request=request)
                else:
                    error = NoResponderError(key.method, url, request=request)
                self._record(key, matched=False, error=str(error))

        self.logger.debug(f"Dispatch: {key}")
        if not result.matched:
            self.logger.warning(f"{type(error).__name__}: {key.method} {url}")
            raise error

        via = 'regex' if result.via_regex else 'exact'
        self.logger.debug(f"Matched {key} via {via} route")

        try:
            response = result.responder.handle(request)
        except Exception as e:
            with self._state_lock:
                self._record(key, matched=True, error=f"{type(e).__name__}: {e}")
            raise

        bind_request(response, request)
        if getattr(response, 'connection', None) is None:
            response.connection = self
        with self._state_lock:
            self._record(key, matched=True, status_code=response.status_code)
        return response

    def _record(
        self,
        key: RouteKey,
        matched: bool,
        status_code: Optional[int] = None,
        error: Optional[str] = None
    ):
        if not self.config.recording_enabled:
            return
        self.recorder.record(RecordedCall(
            method=key.method,
            url=key.url,
            matched=matched,
            status_code=status_code,
            error=error
        ))

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        """``BaseAdapter`` entry point; connection options are irrelevant here."""
        return self.dispatch(request)

    def close(self):
        pass
