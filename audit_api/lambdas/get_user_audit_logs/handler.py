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
from audit_api.lib.response_models import AUDIT_LOG_FIELDS, AuditLogItem, shape_items

SETTINGS = load_settings(
    default_table="AuditLogs",
    default_index_fields=("user_id",),
    default_timestamp_attribute="timestamp",
)

logger = logging.getLogger()
logger.setLevel(SETTINGS.log_level)


def handler(event, context):
    """
    GET /v1/audit/users - One page of a user's audit logs from user_id-index.

    timestamp is the index sort key, so startDate/endDate go into the key
    condition. Follow nextToken for further pages.
    """
    try:
        params = gather_parameters(event)
        items, next_token = execute_query(
            params,
            SETTINGS,
            DynamoStore(),
            range_mode=RangeBoundMode.KEY_CONDITION,
            policy=DrainPolicy.SINGLE_PAGE,
            projection=AUDIT_LOG_FIELDS,
        )

        logger.info(f"Query successful. Found {len(items)} items")
        return success_response(shape_items(AuditLogItem, items), next_token)

    except AuditQueryError as e:
        logger.warning(f"User audit query failed ({e.status_code}): {e.message}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Error executing query: {e}")
        return error_response("Error executing query", status_code=500)
