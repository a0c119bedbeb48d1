"""
EasyMock Exceptions

Error taxonomy shared by the routing engine, responder constructors and
fixture loader.

- Configuration errors are raised from the registering call.
- Routing errors are raised from dispatch and subclass
  ``requests.exceptions.ConnectionError`` so client code sees an ordinary
  connection failure.
- Encoding errors are raised from JSON/XML responder constructors.
"""

from typing import Optional

from requests.exceptions import ConnectionError as RequestsConnectionError


class EasyMockError(Exception):
    """Base class for all EasyMock errors."""


class ConfigurationError(EasyMockError):
    """A test set up the mock transport incorrectly."""


class DuplicateResponderError(ConfigurationError):
    """A responder is already registered under the same route key."""

    def __init__(self, method: str, url: str):
        self.method = method
        self.url = url
        super().__init__(f"responder of [{method} - {url}] already exists")


class InvalidPatternError(ConfigurationError, ValueError):
    """A regex responder was registered with a pattern that does not compile."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        super().__init__(f"invalid url pattern '{pattern}': {reason}")


class FixtureError(ConfigurationError):
    """A route fixture file is missing or malformed."""


class EncodingError(EasyMockError, ValueError):
    """A response value could not be encoded as JSON or XML."""


class RoutingError(RequestsConnectionError, EasyMockError):
    """Dispatch could not produce a response for a request."""

    message_template = "routing failed for url '{url}'"

    def __init__(self, method: str, url: str, request: Optional[object] = None):
        self.method = method
        self.url = url
        super().__init__(self.message_template.format(url=url), request=request)


class NoResponderError(RoutingError):
    """No responder, exact or regex, matches the request."""

    message_template = "routing failed, no responders were found for url '{url}'"


class ResponderUnavailableError(RoutingError):
    """A responder matches the request but is currently disabled."""

    message_template = "url '{url}' is not available"
