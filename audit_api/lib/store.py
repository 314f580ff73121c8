"""
DynamoDB store adapter for the Audit Query API

Wraps the boto3 low-level client so that the rest of the library only deals
with CompiledQuery objects and the error types in errors.py.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError
from botocore.exceptions import ClientError as BotoClientError

from .errors import NotFoundError, ServerError
from .query_builder import CompiledQuery

logger = logging.getLogger(__name__)

# Global client (reused across warm invocations)
_client = None


def get_dynamodb_client():
    """Get or create the DynamoDB client."""
    global _client
    if _client is None:
        logger.info("Creating new DynamoDB client (cold start)")
        _client = boto3.client("dynamodb")
    return _client


class DynamoStore:
    """Query/Scan capability over one DynamoDB client."""

    def __init__(self, client=None):
        self.client = client if client is not None else get_dynamodb_client()

    def fetch_page(
        self,
        query: CompiledQuery,
        start_key: Optional[Dict[str, Any]] = None,
        limit: Optional[int] = None,
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """
        Issue one Query or Scan call.

        Args:
            query: Compiled query; Scan is used when it has no key condition
            start_key: ExclusiveStartKey to resume from
            limit: Store page size

        Returns:
            Tuple of (raw items, LastEvaluatedKey or None)

        Raises:
            NotFoundError: If the table or index does not exist
            ServerError: For any other store failure
        """
        request = query.to_request()
        if start_key:
            request["ExclusiveStartKey"] = start_key
        if limit is not None:
            request["Limit"] = limit

        operation = "scan" if query.is_scan else "query"
        try:
            if query.is_scan:
                response = self.client.scan(**request)
            else:
                response = self.client.query(**request)
        except BotoClientError as e:
            raise _translate_error(e, query) from e
        except BotoCoreError as e:
            logger.error(f"DynamoDB {operation} failed: {e}")
            raise ServerError(f"Error executing {operation}") from e

        return response.get("Items", []), response.get("LastEvaluatedKey")


def _translate_error(error: BotoClientError, query: CompiledQuery) -> Exception:
    code = error.response.get("Error", {}).get("Code", "")
    message = error.response.get("Error", {}).get("Message", "")

    if code == "ResourceNotFoundException":
        logger.warning(f"Table not found: {query.table_name}")
        return NotFoundError("Table not found")

    if code == "ValidationException" and "specified index" in message:
        logger.warning(f"Index not found: {query.table_name}/{query.index_name}")
        return NotFoundError("Index not found")

    logger.error(f"DynamoDB error {code}: {message}")
    return ServerError("Error executing query")
