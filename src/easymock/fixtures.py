"""
EasyMock Route Fixtures

Load responders from YAML or JSON files so fixed test fixtures can live
next to the tests instead of in setup code.

File format:

    config:                      # optional, see MockConfig
      log_level: debug
    routes:
      - method: GET
        url: https://example.test/a
        status: 200
        body: hello
      - method: POST
        pattern: https://example.test/items/[0-9]+
        status: 201
        json: {created: true}
        headers: {X-Request-Id: abc}
        enabled: false

Each route has either ``url`` (exact) or ``pattern`` (regex) and at most one
of ``body``, ``json`` or ``xml``.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import EncodingError, FixtureError
from .mock.activation import default_transport
from .mock.matcher import RouteKey
from .mock.responder import (
    Responder,
    new_bytes_responder,
    new_json_responder,
    new_string_responder,
    new_xml_responder
)
from .mock.transport import MockConfig, MockTransport


logger = logging.getLogger("easymock.fixtures")

BODY_KEYS = ('body', 'json', 'xml')


@dataclass
class RouteFixture:
    """One route entry from a fixture file."""

    method: str
    url: Optional[str] = None
    pattern: Optional[str] = None
    status: int = 200
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    body_kind: str = 'body'
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RouteFixture':
        """
        Create RouteFixture from dictionary.

        Raises:
            FixtureError: If the entry is malformed
        """
        if not isinstance(data, dict):
            raise FixtureError(f"route entry must be a mapping, got {type(data).__name__}")

        url = data.get('url')
        pattern = data.get('pattern')
        if bool(url) == bool(pattern):
            raise FixtureError(f"route entry needs exactly one of 'url' or 'pattern': {data}")

        body_keys = [k for k in BODY_KEYS if k in data]
        if len(body_keys) > 1:
            raise FixtureError(f"route entry has more than one body ({', '.join(body_keys)}): {data}")
        body_kind = body_keys[0] if body_keys else 'body'

        try:
            status = int(data.get('status', 200))
        except (TypeError, ValueError) as e:
            raise FixtureError(f"invalid status in route entry: {data}") from e

        return cls(
            method=str(data.get('method', 'GET')),
            url=url,
            pattern=pattern,
            status=status,
            headers={str(k): str(v) for k, v in (data.get('headers') or {}).items()},
            body=data.get(body_kind),
            body_kind=body_kind,
            enabled=bool(data.get('enabled', True))
        )

    def build_responder(self) -> Responder:
        """
        Build the responder described by this entry.

        Raises:
            FixtureError: If the body cannot be encoded
        """
        try:
            if self.body_kind == 'json':
                responder = new_json_responder(self.status, self.body, self.headers)
            elif self.body_kind == 'xml':
                responder = new_xml_responder(self.status, self.body, self.headers)
            elif isinstance(self.body, bytes):
                responder = new_bytes_responder(self.status, self.body, self.headers)
            else:
                text = '' if self.body is None else str(self.body)
                responder = new_string_responder(self.status, text, self.headers)
        except EncodingError as e:
            raise FixtureError(f"cannot encode body for {self.method} {self.url or self.pattern}: {e}") from e

        if not self.enabled:
            responder.disable()
        return responder

    def register(self, transport: MockTransport) -> RouteKey:
        responder = self.build_responder()
        if self.pattern:
            return transport.register_regex_responder(self.method, self.pattern, responder)
        return transport.register_responder(self.method, self.url, responder)


class FixtureLoader:
    """
    Loader for route fixture files (.yaml, .yml or .json).

    Example:
        loader = FixtureLoader("tests/fixtures/routes.yaml")
        for route in loader.load():
            route.register(transport)
    """

    def __init__(self, file_path: str):
        """
        Initialize fixture loader.

        Args:
            file_path: Path to a YAML or JSON fixture file
        """
        self.file_path = Path(file_path)
        self.config: Optional[MockConfig] = None

    def _read(self) -> Any:
        if not self.file_path.exists():
            raise FixtureError(f"Fixture file not found: {self.file_path}")

        with open(self.file_path, 'r', encoding='utf-8') as f:
            try:
                if self.file_path.suffix.lower() == '.json':
                    return json.load(f)
                return yaml.safe_load(f)
            except (json.JSONDecodeError, yaml.YAMLError) as e:
                raise FixtureError(f"Cannot parse fixture file {self.file_path}: {e}") from e

    def load(self) -> List[RouteFixture]:
        """
        Load route fixtures.

        Accepts a mapping with a ``routes`` list (and optional ``config``) or
        a bare list of routes.

        Raises:
            FixtureError: If the file is missing or malformed
        """
        data = self._read()

        if isinstance(data, dict):
            if 'config' in data:
                self.config = MockConfig.from_dict(data.get('config') or {})
            routes = data.get('routes', [])
        elif isinstance(data, list):
            routes = data
        elif data is None:
            routes = []
        else:
            raise FixtureError(
                f"Unexpected fixture format in {self.file_path}. "
                f"Expected dict or list, got {type(data).__name__}"
            )

        if not isinstance(routes, list):
            raise FixtureError(f"'routes' must be a list in {self.file_path}")

        fixtures = [RouteFixture.from_dict(entry) for entry in routes]
        logger.info(f"Loaded {len(fixtures)} routes from {self.file_path}")
        return fixtures


def load_fixtures(file_path: str, transport: Optional[MockTransport] = None) -> List[RouteKey]:
    """
    Register every route of a fixture file.

    Args:
        file_path: Path to a YAML or JSON fixture file
        transport: Target transport (the process-wide default if omitted)

    Returns:
        Route keys in registration order

    Raises:
        FixtureError: If the file is missing or malformed
        DuplicateResponderError: If a route is already registered
    """
    target = transport if transport is not None else default_transport
    return [route.register(target) for route in FixtureLoader(file_path).load()]


def transport_from_fixtures(file_path: str) -> MockTransport:
    """
    Build a fresh transport configured and populated from a fixture file.

    The file's ``config`` mapping, if any, becomes the transport's MockConfig.
    """
    loader = FixtureLoader(file_path)
    routes = loader.load()
    transport = MockTransport(config=loader.config)
    for route in routes:
        route.register(transport)
    return transport
