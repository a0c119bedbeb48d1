"""
EasyMock Common Utilities

Shared helpers used across EasyMock modules.
"""

from .utils import encode_json, encode_xml, JSON_CONTENT_TYPE, XML_CONTENT_TYPE

__all__ = [
    'encode_json',
    'encode_xml',
    'JSON_CONTENT_TYPE',
    'XML_CONTENT_TYPE',
]
