import logging

from audit_api.lib import (
    AuditQueryError,
    DynamoStore,
    error_response,
    execute_scan,
    gather_parameters,
    load_settings,
    success_response,
)
from audit_api.lib.response_models import AUDIT_LOG_FIELDS, AuditLogItem, shape_items

SETTINGS = load_settings(default_table="AuditLogs", default_timestamp_attribute="timestamp")

logger = logging.getLogger()
logger.setLevel(SETTINGS.log_level)


def handler(event, context):
    """
    GET|POST /v1/audit/logs - Scan audit logs with arbitrary equality filters.

    No field is required. startDate/endDate become a timestamp BETWEEN filter.
    """
    try:
        params = gather_parameters(event)
        items, next_token = execute_scan(params, SETTINGS, DynamoStore(), projection=AUDIT_LOG_FIELDS)
        return success_response(shape_items(AuditLogItem, items), next_token)

    except AuditQueryError as e:
        logger.warning(f"Audit log scan failed ({e.status_code}): {e.message}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Error in query: {e}")
        return error_response("Error processing request", status_code=500)
