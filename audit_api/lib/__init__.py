"""Shared Audit Query API library initialization."""

from .errors import AuditQueryError, ClientError, NotFoundError, ServerError
from .config import QuerySettings, load_settings
from .filter_parser import (
    gather_parameters,
    extract_controls,
    extract_filter_params,
    parse_date_range,
    classify_filters,
)
from .query_builder import DynamoQueryBuilder, CompiledQuery, RangeBoundMode
from .pagination import DrainPolicy, ResultPage, encode_cursor, decode_cursor, paginate
from .attribute_values import AttributeKind, decode_attribute_value, decode_item
from .store import DynamoStore, get_dynamodb_client
from .executor import execute_query, execute_scan
from .response_formatter import success_response, error_response

__all__ = [
    "AuditQueryError",
    "ClientError",
    "NotFoundError",
    "ServerError",
    "QuerySettings",
    "load_settings",
    "gather_parameters",
    "extract_controls",
    "extract_filter_params",
    "parse_date_range",
    "classify_filters",
    "DynamoQueryBuilder",
    "CompiledQuery",
    "RangeBoundMode",
    "DrainPolicy",
    "ResultPage",
    "encode_cursor",
    "decode_cursor",
    "paginate",
    "AttributeKind",
    "decode_attribute_value",
    "decode_item",
    "DynamoStore",
    "get_dynamodb_client",
    "execute_query",
    "execute_scan",
    "success_response",
    "error_response",
]
