"""
Attribute value decoding for the Audit Query API

Turns DynamoDB's typed attribute values ({"S": ...}, {"N": ...}, {"M": ...})
into plain JSON values. Numbers stay strings so no precision is lost.
"""

import base64
from enum import Enum
from typing import Any, Dict, List, Tuple


class AttributeKind(str, Enum):
    """Closed set of attribute value shapes, in decoding priority order."""

    STRING = "S"
    NUMBER = "N"
    BOOLEAN = "BOOL"
    MAP = "M"
    LIST = "L"
    STRING_SET = "SS"
    NUMBER_SET = "NS"
    BINARY_SET = "BS"
    NULL = "NULL"
    BINARY = "B"
    OTHER = "?"


_PRIORITY = [kind for kind in AttributeKind if kind is not AttributeKind.OTHER]


def classify_attribute_value(value: Any) -> Tuple[AttributeKind, Any]:
    """
    Identify the shape of a typed attribute value.

    Args:
        value: One attribute value from a low-level DynamoDB response

    Returns:
        (kind, payload); unrecognized values come back as (OTHER, value)
    """
    if isinstance(value, dict):
        for kind in _PRIORITY:
            if kind.value in value:
                if kind is AttributeKind.NULL and value[kind.value] is not True:
                    continue
                return kind, value[kind.value]
    return AttributeKind.OTHER, value


def _binary_text(member: Any) -> Any:
    if isinstance(member, (bytes, bytearray)):
        return base64.b64encode(bytes(member)).decode("ascii")
    return member


def decode_attribute_value(value: Any) -> Any:
    """Decode one typed attribute value; never raises."""
    kind, payload = classify_attribute_value(value)

    if kind in (AttributeKind.STRING, AttributeKind.NUMBER, AttributeKind.BOOLEAN):
        return payload
    if kind is AttributeKind.MAP and isinstance(payload, dict):
        return {k: decode_attribute_value(v) for k, v in payload.items()}
    if kind is AttributeKind.LIST and isinstance(payload, list):
        return [decode_attribute_value(v) for v in payload]
    if kind in (AttributeKind.STRING_SET, AttributeKind.NUMBER_SET) and isinstance(payload, (list, set, tuple)):
        return list(payload)
    if kind is AttributeKind.BINARY_SET and isinstance(payload, (list, set, tuple)):
        return [_binary_text(m) for m in payload]
    if kind is AttributeKind.NULL:
        return None
    if kind is AttributeKind.BINARY:
        return _binary_text(payload)

    # Unknown or malformed shape: debug representation
    return repr(value)


def decode_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Decode every attribute of one item."""
    return {name: decode_attribute_value(value) for name, value in item.items()}


def decode_items(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [decode_item(item) for item in items]
