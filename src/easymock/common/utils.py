"""
EasyMock Common Utilities

Body encoders shared by responder constructors and response helpers.
Values are encoded eagerly so a responder only ever stores bytes plus a
content type.
"""

import dataclasses
import json
import xml.etree.ElementTree as ET
from typing import Any, Mapping

from ..exceptions import EncodingError


JSON_CONTENT_TYPE = 'application/json'
XML_CONTENT_TYPE = 'application/xml'


def encode_json(value: Any) -> bytes:
    """
    Encode a value as compact UTF-8 JSON.

    Args:
        value: Any value accepted by ``json.dumps``

    Returns:
        Encoded JSON bytes

    Raises:
        EncodingError: If the value is not JSON serializable

    Example:
        body = encode_json({'name': 'ByteDance', 'post_code': 610041})
    """
    try:
        return json.dumps(value, ensure_ascii=False, separators=(',', ':')).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise EncodingError(f"value of type {type(value).__name__} is not JSON encodable: {e}") from e


def encode_xml(value: Any) -> bytes:
    """
    Encode a value as an XML document.

    Supported values:
    - ``xml.etree.ElementTree.Element``: serialized as-is
    - dataclass instance: root tag is the class name, one child per field
    - mapping with exactly one key: the key is the root tag

    Nested mappings become child elements, lists repeat the enclosing tag,
    ``None`` becomes an empty element and scalars become text.

    Raises:
        EncodingError: If the value has no XML representation
    """
    try:
        if isinstance(value, ET.Element):
            root = value
        elif dataclasses.is_dataclass(value) and not isinstance(value, type):
            root = _build_element(type(value).__name__, dataclasses.asdict(value))
        elif isinstance(value, Mapping) and len(value) == 1:
            tag, content = next(iter(value.items()))
            root = _build_element(str(tag), content)
        else:
            raise TypeError(
                "expected an Element, a dataclass instance or a single-key mapping, "
                f"got {type(value).__name__}"
            )
        return ET.tostring(root, encoding='unicode').encode('utf-8')
    except (TypeError, ValueError) as e:
        raise EncodingError(f"value is not XML encodable: {e}") from e


def _build_element(tag: str, content: Any) -> ET.Element:
    """Build one element (list content is handled by the caller)."""
    element = ET.Element(tag)
    _fill_element(element, content)
    return element


def _fill_element(element: ET.Element, content: Any):
    if content is None:
        return

    if isinstance(content, Mapping):
        for key, child in content.items():
            if isinstance(child, (list, tuple)):
                for item in child:
                    element.append(_build_element(str(key), item))
            else:
                element.append(_build_element(str(key), child))
    elif isinstance(content, bool):
        element.text = 'true' if content else 'false'
    elif isinstance(content, (str, int, float)):
        element.text = str(content)
    elif dataclasses.is_dataclass(content) and not isinstance(content, type):
        _fill_element(element, dataclasses.asdict(content))
    else:
        raise TypeError(f"unsupported XML content type {type(content).__name__}")
