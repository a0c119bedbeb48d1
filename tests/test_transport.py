"""
Tests for EasyMock Transport

Tests request dispatch through a requests.Session including:
- Exact and regex routing
- Match/mismatch counters and the grand total
- Routing and availability errors
- Handler error propagation
- Reset and call recording
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

from easymock.exceptions import NoResponderError, ResponderUnavailableError, RoutingError
from easymock.mock.response import new_json_response, new_string_response
from easymock.mock.responder import new_responder, new_string_responder
from easymock.mock.transport import MockConfig, MockTransport


URL_A = 'https://example.test/a'
URL_B = 'https://example.test/b'
ITEMS_PATTERN = r'https://example\.test/items/[0-9]+'


class TestMockConfig:
    """Test MockConfig dataclass."""

    def test_default_config(self):
        """Test default configuration values."""
        config = MockConfig()

        assert config.log_level is None
        assert config.default_method == 'GET'
        assert config.recording_enabled is False
        assert config.recording_limit == 1000

    def test_from_dict(self):
        """Test building config from a mapping."""
        config = MockConfig.from_dict({
            'log_level': 'debug',
            'recording_enabled': True,
            'recording_limit': '5',
            'unknown': 'ignored'
        })

        assert config.log_level == 'debug'
        assert config.recording_enabled is True
        assert config.recording_limit == 5
        assert config.default_method == 'GET'

    def test_log_level_applied(self):
        """Test transport sets its logger level."""
        transport = MockTransport(MockConfig(log_level='debug'))

        assert transport.logger.level == logging.DEBUG

    def test_unset_log_level_keeps_logger_level(self):
        """Test a transport without a configured level leaves the shared logger alone."""
        logger = logging.getLogger('easymock.mock')
        previous = logger.level
        logger.setLevel(logging.ERROR)
        try:
            MockTransport()

            assert logger.level == logging.ERROR
        finally:
            logger.setLevel(previous)


class TestDispatch:
    """Test MockTransport dispatch."""

    def test_exact_route(self, transport, session):
        """Test registered route answers and is counted once."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))

        response = session.get(URL_A)

        assert response.status_code == 200
        assert response.text == 'hello'
        assert response.url == URL_A
        assert response.request.method == 'GET'
        assert response.connection is transport
        assert transport.matched_count('GET', URL_A) == 1
        assert transport.mismatched_count('GET', URL_A) == 0
        assert transport.total_count == 1

    def test_match_leaves_other_counters_unchanged(self, transport, session):
        """Test one dispatch touches only its own route."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'a'))
        transport.register_responder('GET', URL_B, new_string_responder(200, 'b'))
        transport.register_responder('POST', URL_A, new_string_responder(200, 'posted'))

        session.get(URL_A)

        assert transport.matched_count('GET', URL_A) == 1
        assert transport.matched_count('GET', URL_B) == 0
        assert transport.matched_count('POST', URL_A) == 0

    def test_unregistered_route(self, transport, session):
        """Test unknown route raises and counts a mismatch."""
        with pytest.raises(NoResponderError) as exc_info:
            session.get(URL_B)

        assert URL_B in str(exc_info.value)
        assert 'no responders were found' in str(exc_info.value)
        assert exc_info.value.url == URL_B
        assert exc_info.value.method == 'GET'
        assert exc_info.value.request.url == URL_B
        assert transport.mismatched_count('GET', URL_B) == 1
        assert transport.total_count == 1

    def test_routing_errors_are_connection_errors(self, transport, session):
        """Test client code sees an ordinary connection failure."""
        with pytest.raises(requests.exceptions.ConnectionError):
            session.get(URL_B)

    def test_disabled_responder(self, transport, session):
        """Test disabled route fails with the availability error."""
        responder = new_string_responder(200, 'hello')
        transport.register_responder('GET', URL_A, responder)
        responder.disable()

        with pytest.raises(ResponderUnavailableError) as exc_info:
            session.get(URL_A)

        assert str(exc_info.value) == f"url '{URL_A}' is not available"
        assert not isinstance(exc_info.value, NoResponderError)
        assert transport.mismatched_count('GET', URL_A) == 1

        responder.enable()
        assert session.get(URL_A).text == 'hello'
        assert transport.matched_count('GET', URL_A) == 1

    def test_body_replays_across_requests(self, transport, session):
        """Test the same responder serves full bodies repeatedly."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))

        bodies = [session.get(URL_A).content for _ in range(3)]

        assert bodies == [b'hello'] * 3
        assert transport.matched_count('GET', URL_A) == 3

    def test_streamed_body_rewinds(self, transport, session):
        """Test raw body is readable again after exhaustion."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))

        response = session.get(URL_A, stream=True)

        assert response.raw.read() == b'hello'
        assert response.raw.read() == b'hello'

    def test_streamed_iteration_terminates(self, transport, session):
        """Test content iteration without a chunk size yields one pass."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))

        response = session.get(URL_A, stream=True)

        assert list(response.iter_content(chunk_size=None)) == [b'hello']

    def test_regex_route(self, transport, session):
        """Test regex fallback after the exact probe misses."""
        transport.register_regex_responder('GET', ITEMS_PATTERN, new_string_responder(200, 'item'))

        response = session.get('https://example.test/items/42')

        assert response.text == 'item'
        assert transport.matched_count('GET', 'https://example.test/items/42') == 1

    def test_regex_route_any_method(self, transport, session):
        """Test a regex route answers methods other than the registered one."""
        transport.register_regex_responder('GET', ITEMS_PATTERN, new_string_responder(200, 'item'))

        response = session.post('https://example.test/items/42')

        assert response.text == 'item'
        assert transport.matched_count('POST', 'https://example.test/items/42') == 1

    def test_regex_with_query(self, transport, session):
        """Test regex routes see the full URL including the query."""
        transport.register_regex_responder('GET', r'/search\?q=[a-z]+', new_string_responder(200, 'found'))

        assert session.get('https://example.test/search', params={'q': 'books'}).text == 'found'

        with pytest.raises(NoResponderError):
            session.get('https://example.test/search', params={'q': '42'})

    def test_disabled_regex_route(self, transport, session):
        """Test disabled regex route reports unavailability."""
        responder = new_string_responder(200, 'item')
        transport.register_regex_responder('GET', ITEMS_PATTERN, responder)
        responder.disable()

        with pytest.raises(ResponderUnavailableError):
            session.get('https://example.test/items/1')

    def test_empty_method_defaults_to_get(self, transport):
        """Test dispatch of a request without a method."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))
        request = requests.Request('', URL_A).prepare()

        response = transport.dispatch(request)

        assert response.content == b'hello'
        assert transport.matched_count('GET', URL_A) == 1

    def test_handler_errors_propagate(self, transport, session):
        """Test handler exceptions reach the caller unchanged."""
        def handler(request):
            raise ValueError("invalid price")

        transport.register_responder('POST', URL_A, new_responder(handler))

        with pytest.raises(ValueError, match="invalid price"):
            session.post(URL_A)

        assert transport.matched_count('POST', URL_A) == 1

    def test_handler_response_is_bound(self, transport, session):
        """Test unbound handler responses get request and url."""
        transport.register_responder('GET', URL_A, new_responder(lambda r: new_json_response(200, [1, 2])))

        response = session.get(URL_A)

        assert response.json() == [1, 2]
        assert response.request.url == URL_A
        assert response.url == URL_A

    def test_handler_sees_request(self, transport, session):
        """Test handlers receive headers and body."""
        def echo(request):
            return new_string_response(200, f"{request.headers['X-Token']}:{request.body.decode()}")

        transport.register_responder('PUT', URL_A, new_responder(echo))

        response = session.put(URL_A, data=b'payload', headers={'X-Token': 't1'})

        assert response.text == 't1:payload'

    def test_remove_responder(self, transport, session):
        """Test removed route becomes unknown."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))
        transport.remove_responder('GET', URL_A)

        with pytest.raises(NoResponderError):
            session.get(URL_A)

    def test_redirects_are_followed(self, transport, session):
        """Test redirect responses are routed like any other request."""
        transport.register_responder('GET', URL_A, new_string_responder(302, '', headers={'Location': URL_B}))
        transport.register_responder('GET', URL_B, new_string_responder(200, 'landed'))

        response = session.get(URL_A)

        assert response.text == 'landed'
        assert [r.status_code for r in response.history] == [302]
        assert transport.total_count == 2

    def test_parallel_dispatch(self, transport, session):
        """Test concurrent requests are all answered and counted."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))

        with ThreadPoolExecutor(max_workers=8) as executor:
            bodies = list(executor.map(lambda _: transport.dispatch(
                requests.Request('GET', URL_A).prepare()).content, range(50)))

        assert bodies == [b'hello'] * 50
        assert transport.matched_count('GET', URL_A) == 50
        assert transport.total_count == 50


class TestReset:
    """Test MockTransport.reset."""

    def test_reset_forgets_routes_and_counters(self, transport, session):
        """Test reset leaves every route unknown and every counter at zero."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))
        transport.register_regex_responder('GET', ITEMS_PATTERN, new_string_responder(200, 'item'))
        session.get(URL_A)
        with pytest.raises(RoutingError):
            session.get(URL_B)

        transport.reset()

        assert transport.matched_count('GET', URL_A) == 0
        assert transport.mismatched_count('GET', URL_B) == 0
        assert transport.total_count == 0

        with pytest.raises(NoResponderError):
            session.get(URL_A)
        with pytest.raises(NoResponderError):
            session.get('https://example.test/items/1')

    def test_reset_allows_reregistration(self, transport):
        """Test keys are free again after reset."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))
        transport.reset()

        transport.register_responder('GET', URL_A, new_string_responder(200, 'again'))

    def test_reset_waits_for_dispatch_bookkeeping(self, transport):
        """Test reset does not interleave with a dispatch updating counters."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))

        with transport._state_lock:
            worker = threading.Thread(target=transport.reset)
            worker.start()
            worker.join(timeout=0.1)
            assert worker.is_alive()
            assert len(transport.routes) == 1

        worker.join(timeout=5)
        assert not worker.is_alive()
        assert len(transport.routes) == 0

    def test_counters_consistent_under_concurrent_reset(self, transport):
        """Test every counted request is either a match or a mismatch across resets."""
        def dispatch(i):
            if i % 10 == 0:
                transport.reset()
            transport.register_responder('GET', f'https://example.test/{i}', new_string_responder(200, ''))
            try:
                transport.dispatch(requests.Request('GET', f'https://example.test/{i}').prepare())
            except NoResponderError:
                pass
            with pytest.raises(NoResponderError):
                transport.dispatch(requests.Request('GET', URL_B).prepare())

        with ThreadPoolExecutor(max_workers=8) as executor:
            list(executor.map(dispatch, range(100)))

        stats = transport.stats
        assert stats.total_count == stats.matched_total + stats.mismatched_total


class TestRecording:
    """Test call recording."""

    def test_disabled_by_default(self, transport, session):
        """Test nothing is recorded without the config flag."""
        transport.register_responder('GET', URL_A, new_string_responder(200, 'hello'))
        session.get(URL_A)

        assert transport.calls == []

    def test_records_matches_and_misses(self, session):
        """Test recorded history."""
        transport = MockTransport(MockConfig(recording_enabled=True))
        session.mount('https://', transport)
        transport.register_responder('GET', URL_A, new_string_responder(201, 'hello'))

        session.get(URL_A)
        with pytest.raises(NoResponderError):
            session.get(URL_B)

        calls = transport.calls
        assert [(c.url, c.matched, c.status_code) for c in calls] == [
            (URL_A, True, 201),
            (URL_B, False, None),
        ]
        assert 'no responders were found' in calls[1].error

    def test_records_handler_errors(self, session):
        """Test handler exceptions are recorded before propagating."""
        transport = MockTransport(MockConfig(recording_enabled=True))
        session.mount('https://', transport)

        def handler(request):
            raise RuntimeError("boom")

        transport.register_responder('GET', URL_A, new_responder(handler))

        with pytest.raises(RuntimeError):
            session.get(URL_A)

        assert transport.calls[0].error == 'RuntimeError: boom'

    def test_recording_limit(self, session):
        """Test history keeps the most recent calls."""
        transport = MockTransport(MockConfig(recording_enabled=True, recording_limit=2))
        session.mount('https://', transport)
        transport.register_responder('GET', URL_A, new_string_responder(200, 'a'))
        transport.register_responder('GET', URL_B, new_string_responder(200, 'b'))

        session.get(URL_A)
        session.get(URL_B)
        session.get(URL_A)

        assert [c.url for c in transport.calls] == [URL_B, URL_A]

    def test_reset_clears_history(self, session):
        """Test reset drops recorded calls."""
        transport = MockTransport(MockConfig(recording_enabled=True))
        session.mount('https://', transport)
        transport.register_responder('GET', URL_A, new_string_responder(200, 'a'))
        session.get(URL_A)

        transport.reset()

        assert transport.calls == []
