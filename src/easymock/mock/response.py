"""
EasyMock Responses

Builders for ``requests.Response`` objects served by the mock transport.

Canned responses are built once at registration time and rendered per
request; the standalone builders are meant for dynamic handlers.
"""

from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Dict, Optional, Union

import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from ..common import encode_json, encode_xml, JSON_CONTENT_TYPE, XML_CONTENT_TYPE
from .body import ReplayableBody


def reason_phrase(status_code: int) -> str:
    """Standard reason phrase for a status code, or '' for unknown codes."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ''


def build_response(
    status_code: int,
    body: ReplayableBody,
    headers: Optional[Dict[str, str]] = None,
    request: Optional[requests.PreparedRequest] = None
) -> requests.Response:
    """
    Build a response whose raw stream is ``body``.

    Args:
        status_code: HTTP status code
        body: Body materializer used as ``response.raw``
        headers: Response headers
        request: Request to bind, if already known

    Returns:
        requests.Response ready to be returned from a transport adapter
    """
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason_phrase(status_code)
    response.headers = CaseInsensitiveDict(headers or {})
    if 'Content-Length' not in response.headers:
        response.headers['Content-Length'] = str(len(body))
    response.raw = body
    response.encoding = get_encoding_from_headers(response.headers)

    if request is not None:
        bind_request(response, request)

    return response


def bind_request(response: requests.Response, request: requests.PreparedRequest) -> requests.Response:
    """Attach the originating request, keeping any values a handler already set."""
    if response.request is None:
        response.request = request
    if response.url is None:
        response.url = request.url
    return response


@dataclass
class CannedResponse:
    """Fixed response rendered afresh for every request."""

    status_code: int
    body: ReplayableBody = field(default_factory=ReplayableBody)
    headers: Dict[str, str] = field(default_factory=dict)

    def render(self, request: Optional[requests.PreparedRequest] = None) -> requests.Response:
        """Render a response with its own cursor over the shared payload."""
        return build_response(self.status_code, self.body.clone(), dict(self.headers), request)

    @classmethod
    def from_payload(
        cls,
        status_code: int,
        payload: Union[str, bytes],
        headers: Optional[Dict[str, str]] = None
    ) -> 'CannedResponse':
        return cls(status_code=status_code, body=ReplayableBody(payload), headers=dict(headers or {}))

    @classmethod
    def from_json(cls, status_code: int, value: Any, headers: Optional[Dict[str, str]] = None) -> 'CannedResponse':
        """
        Encode ``value`` as JSON now and set ``Content-Type: application/json``.

        Raises:
            EncodingError: If the value is not JSON serializable
        """
        all_headers = dict(headers or {})
        all_headers['Content-Type'] = JSON_CONTENT_TYPE
        return cls.from_payload(status_code, encode_json(value), all_headers)

    @classmethod
    def from_xml(cls, status_code: int, value: Any, headers: Optional[Dict[str, str]] = None) -> 'CannedResponse':
        """
        Encode ``value`` as XML now and set ``Content-Type: application/xml``.

        Raises:
            EncodingError: If the value has no XML representation
        """
        all_headers = dict(headers or {})
        all_headers['Content-Type'] = XML_CONTENT_TYPE
        return cls.from_payload(status_code, encode_xml(value), all_headers)


def new_string_response(status_code: int, body: str, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    return build_response(status_code, ReplayableBody(body), headers)


def new_bytes_response(status_code: int, body: bytes, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    return build_response(status_code, ReplayableBody(body), headers)


def new_json_response(status_code: int, value: Any, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    """
    Build a JSON response for use inside a dynamic handler.

    Example:
        def list_books(request):
            return new_json_response(200, books)

    Raises:
        EncodingError: If the value is not JSON serializable
    """
    return CannedResponse.from_json(status_code, value, headers).render()


def new_xml_response(status_code: int, value: Any, headers: Optional[Dict[str, str]] = None) -> requests.Response:
    """Build an XML response for use inside a dynamic handler."""
    return CannedResponse.from_xml(status_code, value, headers).render()
