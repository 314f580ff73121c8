import logging

from audit_api.lib import (
    AuditQueryError,
    DrainPolicy,
    DynamoStore,
    RangeBoundMode,
    error_response,
    execute_query,
    gather_parameters,
    load_settings,
    success_response,
)
from audit_api.lib.response_models import AuditItem, shape_items

SETTINGS = load_settings(
    default_table="user_audit_table",
    default_index_fields=("userId", "applicationId", "resourceId"),
    default_timestamp_attribute="eventTimestamp",
)

logger = logging.getLogger()
logger.setLevel(SETTINGS.log_level)


def handler(event, context):
    """
    GET|POST /v1/audit/items - Query audit items by userId, applicationId or resourceId.

    The first index field supplied picks the <field>-index GSI. startDate/endDate
    bound eventTimestamp in the filter expression; every other parameter is an
    equality filter. Pages are drained until the store is exhausted or limit
    items have been collected.
    """
    try:
        params = gather_parameters(event)
        items, next_token = execute_query(
            params,
            SETTINGS,
            DynamoStore(),
            range_mode=RangeBoundMode.FILTER_CLAUSE,
            policy=DrainPolicy.DRAIN_ALL,
        )

        audit_items = shape_items(AuditItem, items)
        logger.info(f"Returning {len(audit_items)} audit items")
        return success_response(audit_items, next_token)

    except AuditQueryError as e:
        logger.warning(f"Audit item query failed ({e.status_code}): {e.message}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Error querying audit items: {e}")
        return error_response("Internal server error", status_code=500)
