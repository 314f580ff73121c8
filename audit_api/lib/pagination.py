"""
Pagination utilities for the Audit Query API

Provides opaque nextToken cursors over DynamoDB's LastEvaluatedKey and the page
loop that follows the store's continuation protocol.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import ClientError
from .query_builder import CompiledQuery

logger = logging.getLogger(__name__)

# (items, last_evaluated_key) for one store round trip
PageFetcher = Callable[[CompiledQuery, Optional[Dict[str, Any]], Optional[int]], Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]]


class DrainPolicy(str, Enum):
    """How many store pages one request consumes."""

    # One store page per request; the continuation goes back as nextToken
    SINGLE_PAGE = "single_page"
    # Follow continuations until the store is exhausted or the limit is reached
    DRAIN_ALL = "drain_all"


@dataclass
class ResultPage:
    """Accumulated raw items plus the continuation, if any."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    last_evaluated_key: Optional[Dict[str, Any]] = None
    pages_fetched: int = 0

    @property
    def next_token(self) -> Optional[str]:
        return encode_cursor(self.last_evaluated_key)


def _key_to_json(value: Dict[str, Any]) -> Dict[str, Any]:
    # Binary key values are bytes in boto3; carry them as base64 text
    if "B" in value and isinstance(value["B"], (bytes, bytearray)):
        return {"B": base64.b64encode(bytes(value["B"])).decode("ascii")}
    return value


def _key_from_json(value: Any) -> Dict[str, Any]:
    if not isinstance(value, dict) or len(value) != 1:
        raise ValueError("cursor attribute must be a single-tag map")
    if "B" in value:
        return {"B": base64.b64decode(value["B"], validate=True)}
    return value


def encode_cursor(last_key: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    Encode a LastEvaluatedKey as an opaque nextToken.

    Args:
        last_key: LastEvaluatedKey from a Query/Scan response

    Returns:
        Base64 token, or None when there is no continuation
    """
    if not last_key:
        return None

    payload = {name: _key_to_json(value) for name, value in last_key.items()}
    data = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return base64.b64encode(data.encode("utf-8")).decode("ascii")


def decode_cursor(token: str) -> Dict[str, Any]:
    """
    Decode a nextToken back into an ExclusiveStartKey.

    Args:
        token: Value produced by encode_cursor

    Returns:
        LastEvaluatedKey mapping

    Raises:
        ClientError: If the token is not a valid cursor
    """
    try:
        data = base64.b64decode(token, validate=True).decode("utf-8")
        parsed = json.loads(data)
        if not isinstance(parsed, dict) or not parsed:
            raise ValueError("cursor must decode to a non-empty object")
        return {str(name): _key_from_json(value) for name, value in parsed.items()}
    except (binascii.Error, UnicodeDecodeError, ValueError, TypeError) as e:
        logger.warning(f"Rejecting invalid nextToken: {e}")
        raise ClientError("Invalid nextToken") from e


def paginate(
    fetch_page: PageFetcher,
    query: CompiledQuery,
    start_key: Optional[Dict[str, Any]] = None,
    policy: DrainPolicy = DrainPolicy.SINGLE_PAGE,
) -> ResultPage:
    """
    Run a compiled query, following continuations per the drain policy.

    SINGLE_PAGE forwards query.limit to the store and returns one page.
    DRAIN_ALL keeps fetching until the store runs out; when query.limit is set
    it stops once that many items are held, after finishing the current page,
    and returns the remaining continuation.

    Args:
        fetch_page: Store call returning (items, last_evaluated_key)
        query: Compiled query
        start_key: ExclusiveStartKey to resume from
        policy: Drain policy

    Returns:
        ResultPage
    """
    page = ResultPage()
    position = start_key

    while True:
        store_limit = query.limit if policy == DrainPolicy.SINGLE_PAGE else None
        items, last_key = fetch_page(query, position, store_limit)
        page.items.extend(items)
        page.pages_fetched += 1
        position = last_key or None

        if position is None or policy == DrainPolicy.SINGLE_PAGE:
            break
        if query.limit is not None and len(page.items) >= query.limit:
            break

    page.last_evaluated_key = position
    logger.info(
        f"Fetched {len(page.items)} items in {page.pages_fetched} page(s) "
        f"(more={'yes' if position else 'no'})"
    )
    return page
