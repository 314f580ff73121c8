"""
Configuration for Audit Query API handlers

Settings are read from environment variables once per cold start. A local
.env file is honoured when present.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from dotenv import load_dotenv

# Load environment variables from .env file if present
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGE_LIMIT = 1000


@dataclass(frozen=True)
class QuerySettings:
    """Static inputs for one query entry point."""

    table_name: Optional[str]
    index_fields: Tuple[str, ...] = ()
    timestamp_attribute: str = "timestamp"
    max_page_limit: int = DEFAULT_MAX_PAGE_LIMIT
    log_level: str = "INFO"


def _parse_fields(raw: Optional[str]) -> Tuple[str, ...]:
    if not raw:
        return ()
    return tuple(f.strip() for f in raw.split(",") if f.strip())


def load_settings(
    default_table: Optional[str] = None,
    default_index_fields: Sequence[str] = (),
    default_timestamp_attribute: str = "timestamp",
) -> QuerySettings:
    """
    Build settings from the environment, falling back to per-handler defaults.

    Environment variables:
        AUDIT_TABLE: Target table name
        INDEX_FIELDS: Comma-separated, ordered list of index field names
        TIMESTAMP_ATTRIBUTE: Attribute that startDate/endDate bound
        MAX_PAGE_LIMIT: Upper bound for the limit parameter
        LOG_LEVEL: Handler log level

    Args:
        default_table: Table used when AUDIT_TABLE is unset
        default_index_fields: Index fields used when INDEX_FIELDS is unset
        default_timestamp_attribute: Range attribute used when TIMESTAMP_ATTRIBUTE is unset

    Returns:
        QuerySettings instance
    """
    index_fields = _parse_fields(os.environ.get("INDEX_FIELDS")) or tuple(default_index_fields)

    try:
        max_page_limit = int(os.environ.get("MAX_PAGE_LIMIT", DEFAULT_MAX_PAGE_LIMIT))
    except ValueError:
        logger.warning(f"Invalid MAX_PAGE_LIMIT: {os.environ.get('MAX_PAGE_LIMIT')}")
        max_page_limit = DEFAULT_MAX_PAGE_LIMIT

    return QuerySettings(
        table_name=os.environ.get("AUDIT_TABLE", default_table),
        index_fields=index_fields,
        timestamp_attribute=os.environ.get("TIMESTAMP_ATTRIBUTE", default_timestamp_attribute),
        max_page_limit=max(1, max_page_limit),
        log_level=os.environ.get("LOG_LEVEL", "INFO"),
    )
