"""
Filter parser for the Audit Query API

Collects request parameters from an API Gateway event and classifies them into
an index selector, an optional timestamp range and residual equality filters.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from requests.structures import CaseInsensitiveDict

from .errors import ClientError

logger = logging.getLogger(__name__)

# Parameters that steer the request rather than filter items
CONTROL_PARAMS = ("nextToken", "limit", "consistentRead", "tableName", "indexName")

START_DATE_PARAM = "startDate"
END_DATE_PARAM = "endDate"

# Non-ISO layouts accepted for startDate/endDate
_DATE_FORMATS = ["%m/%d/%Y", "%m/%d/%Y %H:%M:%S", "%Y/%m/%d"]


@dataclass(frozen=True)
class IndexSelector:
    """The single attribute that picks the partition/index to query."""

    field_name: str
    value: str

    @property
    def index_name(self) -> str:
        return f"{self.field_name}-index"


@dataclass(frozen=True)
class RangeBound:
    """Inclusive start/end bounds over the timestamp attribute."""

    start: str
    end: str


@dataclass
class RequestControls:
    """Non-filter request parameters."""

    next_token: Optional[str] = None
    limit: Optional[int] = None
    consistent_read: bool = False
    table_name: Optional[str] = None
    index_name: Optional[str] = None


@dataclass
class FilterClassification:
    """Result of splitting request parameters for the query builder."""

    index_selector: Optional[IndexSelector] = None
    range_bound: Optional[RangeBound] = None
    filters: List[Tuple[str, str]] = field(default_factory=list)


def _read_body(event: Dict[str, Any]) -> Dict[str, Any]:
    body = event.get("body")
    if not body or not str(body).strip():
        return {}

    try:
        if event.get("isBase64Encoded"):
            body = base64.b64decode(body).decode("utf-8")
        parsed = json.loads(body)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        logger.warning(f"Ignoring unparsable request body: {e}")
        return {}

    if not isinstance(parsed, dict):
        logger.warning("Ignoring request body that is not a JSON object")
        return {}
    return parsed


def gather_parameters(event: Dict[str, Any]) -> CaseInsensitiveDict:
    """
    Merge query string and JSON body parameters into one case-insensitive map.

    Body values supersede query string values with the same name. Blank values
    are dropped and the rest are trimmed. Parameters with a blank name are
    skipped. Non-string body values are ignored, except an integer limit.

    Args:
        event: API Gateway event dict

    Returns:
        CaseInsensitiveDict of parameter name to trimmed string value
    """
    params = CaseInsensitiveDict()

    query_params = event.get("queryStringParameters") or {}
    for key, value in query_params.items():
        if not key.strip():
            continue
        if isinstance(value, str) and value.strip():
            params[key] = value.strip()

    for key, value in _read_body(event).items():
        if not key.strip():
            continue
        if key.lower() == "limit" and isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str) and value.strip():
            params[key] = value.strip()

    return params


def parse_limit(raw: Optional[str], max_limit: int = 1000) -> Optional[int]:
    """
    Parse the limit parameter.

    Args:
        raw: Raw limit value
        max_limit: Cap applied to valid values

    Returns:
        Positive int capped at max_limit, or None if absent or invalid
    """
    if raw is None:
        return None
    try:
        limit = int(raw)
    except (ValueError, TypeError):
        logger.warning(f"Invalid limit: {raw}")
        return None
    if limit <= 0:
        logger.warning(f"Ignoring non-positive limit: {limit}")
        return None
    return min(limit, max_limit)


def extract_controls(params: CaseInsensitiveDict, max_limit: int = 1000) -> RequestControls:
    """Pull the control parameters (nextToken, limit, ...) out of the request map."""
    return RequestControls(
        next_token=params.get("nextToken"),
        limit=parse_limit(params.get("limit"), max_limit),
        consistent_read="consistentRead" in params,
        table_name=params.get("tableName"),
        index_name=params.get("indexName"),
    )


def extract_filter_params(params: CaseInsensitiveDict) -> List[Tuple[str, str]]:
    """
    Extract only filter-related parameters (exclude nextToken, limit, etc.).

    Args:
        params: All request parameters

    Returns:
        Ordered list of (name, value) pairs
    """
    reserved = {p.lower() for p in CONTROL_PARAMS}
    return [(k, v) for k, v in params.items() if k.lower() not in reserved]


def normalize_timestamp(value: str) -> Optional[str]:
    """
    Validate a date or date/time and return the literal to compare against.

    ISO-8601 input is returned unchanged. The slash layouts are rewritten as
    ISO-8601 so they order correctly against ISO-stored timestamps.

    Returns:
        Comparable timestamp string, or None if the value does not parse
    """
    try:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, fmt)
        except ValueError:
            continue
        if "%H" in fmt:
            return parsed.isoformat()
        return parsed.date().isoformat()
    return None


def is_valid_timestamp(value: str) -> bool:
    """Check whether a string parses as a date or date/time."""
    return normalize_timestamp(value) is not None


def parse_date_range(params: CaseInsensitiveDict) -> Optional[RangeBound]:
    """
    Parse startDate/endDate parameters.

    Both bounds must be present and parse as timestamps; otherwise neither is
    used. ISO-8601 bounds keep the caller's strings; other accepted layouts
    are rewritten as ISO-8601.

    Args:
        params: Request parameters

    Returns:
        RangeBound or None
    """
    start_date = params.get(START_DATE_PARAM)
    end_date = params.get(END_DATE_PARAM)

    if not start_date or not end_date:
        if start_date or end_date:
            logger.warning("Ignoring date range: both startDate and endDate are required")
        return None

    start = normalize_timestamp(start_date)
    end = normalize_timestamp(end_date)
    if start is None or end is None:
        logger.warning(f"Ignoring malformed date range: {start_date} - {end_date}")
        return None

    return RangeBound(start=start, end=end)


def classify_filters(
    params: CaseInsensitiveDict,
    index_fields: Sequence[str] = (),
    require_index: bool = True,
    use_range: bool = True,
) -> FilterClassification:
    """
    Split request parameters into index selector, range bound and filters.

    The first parameter (in request order) naming a recognized index field
    becomes the selector; later index fields are plain filters.

    Args:
        params: Request parameters from gather_parameters
        index_fields: Ordered recognized index field names
        require_index: Raise ClientError when no index field is supplied
        use_range: Treat startDate/endDate as a timestamp range; when off
            they are ordinary equality filters

    Returns:
        FilterClassification

    Raises:
        ClientError: If require_index is set and no index field was supplied
    """
    recognized = {f.lower(): f for f in index_fields}
    range_params = {START_DATE_PARAM.lower(), END_DATE_PARAM.lower()} if use_range else set()

    result = FilterClassification(range_bound=parse_date_range(params) if use_range else None)

    for key, value in extract_filter_params(params):
        if key.lower() in range_params:
            continue

        if result.index_selector is None and key.lower() in recognized:
            result.index_selector = IndexSelector(field_name=recognized[key.lower()], value=value)
            continue

        result.filters.append((key, value))

    if require_index and result.index_selector is None:
        raise ClientError(f"Must include one of: {', '.join(index_fields)}")

    return result
