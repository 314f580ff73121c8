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

SETTINGS = load_settings()

logger = logging.getLogger()
logger.setLevel(SETTINGS.log_level)


def handler(event, context):
    """
    GET|POST /v1/tables/scan - Scan any table named by tableName.

    Optional controls: indexName, limit (max 1000), consistentRead, nextToken.
    All other parameters are equality filters.
    """
    try:
        params = gather_parameters(event)
        items, next_token = execute_scan(params, SETTINGS, DynamoStore(), dynamic_target=True)
        return success_response(items, next_token)

    except AuditQueryError as e:
        logger.warning(f"Table scan failed ({e.status_code}): {e.message}")
        return error_response(e.message, status_code=e.status_code)
    except Exception as e:
        logger.exception(f"Error: {e}")
        return error_response("Internal server error", status_code=500)
