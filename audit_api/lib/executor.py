"""
Query execution for the Audit Query API

Ties the pieces together: classify parameters, compile expressions, page
through the store and decode the items.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from requests.structures import CaseInsensitiveDict

from .attribute_values import decode_items
from .config import QuerySettings
from .errors import ClientError
from .filter_parser import classify_filters, extract_controls
from .pagination import DrainPolicy, decode_cursor, paginate
from .query_builder import DynamoQueryBuilder, RangeBoundMode
from .store import DynamoStore


def execute_query(
    params: CaseInsensitiveDict,
    settings: QuerySettings,
    store: DynamoStore,
    range_mode: RangeBoundMode = RangeBoundMode.FILTER_CLAUSE,
    policy: DrainPolicy = DrainPolicy.SINGLE_PAGE,
    projection: Sequence[str] = (),
) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """
    Query the index picked by the request's index field.

    Args:
        params: Output of gather_parameters
        settings: Table, index fields and timestamp attribute
        store: Store adapter
        range_mode: Placement of startDate/endDate
        policy: Drain policy
        projection: Attributes to return (empty = all)

    Returns:
        Tuple of (decoded items, nextToken or None)

    Raises:
        ClientError: Missing index field or invalid nextToken
        NotFoundError: Table or index does not exist
        ServerError: Any other store failure
    """
    controls = extract_controls(params, settings.max_page_limit)
    classification = classify_filters(params, settings.index_fields)
    start_key = decode_cursor(controls.next_token) if controls.next_token else None

    builder = DynamoQueryBuilder(
        settings.table_name,
        timestamp_attribute=settings.timestamp_attribute,
        range_mode=range_mode,
        projection=projection,
    )
    query = builder.build_query(
        classification, consistent_read=controls.consistent_read, limit=controls.limit
    )

    page = paginate(store.fetch_page, query, start_key=start_key, policy=policy)
    return decode_items(page.items), page.next_token


def execute_scan(
    params: CaseInsensitiveDict,
    settings: QuerySettings,
    store: DynamoStore,
    projection: Sequence[str] = (),
    dynamic_target: bool = False,
) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """
    Scan a table (or one of its indexes), one store page per request.

    Args:
        params: Output of gather_parameters
        settings: Default table and timestamp attribute
        store: Store adapter
        projection: Attributes to return (empty = all)
        dynamic_target: Take tableName/indexName from the request; startDate
            and endDate are then plain filters since the table is unknown

    Returns:
        Tuple of (decoded items, nextToken or None)

    Raises:
        ClientError: Missing tableName (dynamic_target) or invalid nextToken
        NotFoundError: Table or index does not exist
        ServerError: Any other store failure
    """
    controls = extract_controls(params, settings.max_page_limit)
    table_name = controls.table_name if dynamic_target else settings.table_name
    if not table_name:
        raise ClientError("TableName is required")

    start_key = decode_cursor(controls.next_token) if controls.next_token else None

    classification = classify_filters(params, require_index=False, use_range=not dynamic_target)

    builder = DynamoQueryBuilder(
        table_name,
        timestamp_attribute=settings.timestamp_attribute,
        projection=projection,
    )
    query = builder.build_scan(
        classification,
        consistent_read=controls.consistent_read,
        limit=controls.limit,
        index_name=controls.index_name if dynamic_target else None,
    )

    page = paginate(store.fetch_page, query, start_key=start_key, policy=DrainPolicy.SINGLE_PAGE)
    return decode_items(page.items), page.next_token

