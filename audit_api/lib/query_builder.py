"""
DynamoDB expression builder for the Audit Query API

Compiles classified request filters into key-condition, filter and projection
expressions. Attribute names always go through ExpressionAttributeNames and
literals through ExpressionAttributeValues, so user input never lands in the
expression text and reserved words (timestamp, role, ...) are safe.
"""

import re
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .errors import ClientError
from .filter_parser import FilterClassification, RangeBound

logger = logging.getLogger(__name__)


class RangeBoundMode(str, Enum):
    """Where startDate/endDate end up in a Query."""

    # Range attribute is the index sort key: BETWEEN in the key condition
    KEY_CONDITION = "key_condition"
    # Range attribute is a plain attribute: >= / <= in the filter expression
    FILTER_CLAUSE = "filter_clause"


@dataclass
class CompiledQuery:
    """Everything needed for one DynamoDB Query or Scan call."""

    table_name: str
    key_condition_expression: Optional[str] = None
    filter_expression: Optional[str] = None
    projection_expression: Optional[str] = None
    name_aliases: Dict[str, str] = field(default_factory=dict)
    value_aliases: Dict[str, Dict[str, str]] = field(default_factory=dict)
    index_name: Optional[str] = None
    consistent_read: bool = False
    limit: Optional[int] = None

    @property
    def is_scan(self) -> bool:
        return self.key_condition_expression is None

    def to_request(self) -> Dict[str, object]:
        """Render as keyword arguments for the boto3 low-level client."""
        request: Dict[str, object] = {"TableName": self.table_name}
        if self.key_condition_expression:
            request["KeyConditionExpression"] = self.key_condition_expression
        if self.filter_expression:
            request["FilterExpression"] = self.filter_expression
        if self.projection_expression:
            request["ProjectionExpression"] = self.projection_expression
        if self.name_aliases:
            request["ExpressionAttributeNames"] = dict(self.name_aliases)
        if self.value_aliases:
            request["ExpressionAttributeValues"] = dict(self.value_aliases)
        if self.index_name:
            request["IndexName"] = self.index_name
        if self.consistent_read:
            request["ConsistentRead"] = True
        return request


class _AliasTable:
    """Hands out placeholder tokens for attribute names and literal values."""

    def __init__(self):
        self.names: Dict[str, str] = {}
        self.values: Dict[str, Dict[str, str]] = {}
        self._name_tokens: Dict[str, str] = {}

    def name(self, attribute: str) -> str:
        """One token per distinct attribute name, reused on repeat."""
        if attribute in self._name_tokens:
            return self._name_tokens[attribute]

        base = "#" + (re.sub(r"[^0-9A-Za-z_]", "_", attribute) or "attr")
        token = base
        suffix = 1
        while token in self.names:
            token = f"{base}_{suffix}"
            suffix += 1

        self._name_tokens[attribute] = token
        self.names[token] = attribute
        return token

    def value(self, literal: str) -> str:
        """A fresh placeholder for every literal occurrence."""
        token = f":v{len(self.values)}"
        self.values[token] = {"S": literal}
        return token


class DynamoQueryBuilder:
    """Build DynamoDB Query/Scan expressions from classified filters."""

    def __init__(
        self,
        table_name: str,
        timestamp_attribute: str = "timestamp",
        range_mode: RangeBoundMode = RangeBoundMode.FILTER_CLAUSE,
        projection: Sequence[str] = (),
    ):
        """
        Initialize query builder.

        Args:
            table_name: Target DynamoDB table
            timestamp_attribute: Attribute bounded by startDate/endDate
            range_mode: Placement of the range bound in Query mode
            projection: Ordered attribute names to return (empty = all)
        """
        self.table_name = table_name
        self.timestamp_attribute = timestamp_attribute
        self.range_mode = range_mode
        self.projection = tuple(projection)

    def build_query(
        self,
        classification: FilterClassification,
        consistent_read: bool = False,
        limit: Optional[int] = None,
    ) -> CompiledQuery:
        """
        Compile a Query against the selector's index.

        Args:
            classification: Output of filter_parser.classify_filters
            consistent_read: Request strongly consistent reads
            limit: Page size forwarded to the store

        Returns:
            CompiledQuery

        Raises:
            ClientError: If no index selector was classified
        """
        selector = classification.index_selector
        if selector is None:
            raise ClientError("Query requires an index field")

        aliases = _AliasTable()
        key_condition = f"{aliases.name(selector.field_name)} = {aliases.value(selector.value)}"

        conditions: List[str] = []
        bound = classification.range_bound
        if bound is not None and self.range_mode == RangeBoundMode.KEY_CONDITION:
            key_condition += " AND " + self._between(aliases, bound)
        elif bound is not None:
            ts = aliases.name(self.timestamp_attribute)
            conditions.append(f"{ts} >= {aliases.value(bound.start)}")
            conditions.append(f"{ts} <= {aliases.value(bound.end)}")

        conditions.extend(self._equality_conditions(aliases, classification.filters))

        compiled = CompiledQuery(
            table_name=self.table_name,
            key_condition_expression=key_condition,
            filter_expression=" AND ".join(conditions) or None,
            projection_expression=self._projection(aliases),
            name_aliases=aliases.names,
            value_aliases=aliases.values,
            index_name=selector.index_name,
            consistent_read=consistent_read,
            limit=limit,
        )
        logger.info(
            f"Compiled query on {self.table_name}/{compiled.index_name}: "
            f"key={compiled.key_condition_expression!r} filter={compiled.filter_expression!r}"
        )
        return compiled

    def build_scan(
        self,
        classification: FilterClassification,
        consistent_read: bool = False,
        limit: Optional[int] = None,
        index_name: Optional[str] = None,
    ) -> CompiledQuery:
        """
        Compile a Scan where every parameter (index selector included) is a filter.

        Args:
            classification: Output of filter_parser.classify_filters
            consistent_read: Request strongly consistent reads
            limit: Page size forwarded to the store
            index_name: Optional secondary index to scan

        Returns:
            CompiledQuery with no key condition
        """
        aliases = _AliasTable()

        filters: List[Tuple[str, str]] = []
        if classification.index_selector is not None:
            selector = classification.index_selector
            filters.append((selector.field_name, selector.value))
        filters.extend(classification.filters)

        conditions = self._equality_conditions(aliases, filters)
        if classification.range_bound is not None:
            conditions.append(self._between(aliases, classification.range_bound))

        compiled = CompiledQuery(
            table_name=self.table_name,
            filter_expression=" AND ".join(conditions) or None,
            projection_expression=self._projection(aliases),
            name_aliases=aliases.names,
            value_aliases=aliases.values,
            index_name=index_name,
            consistent_read=consistent_read,
            limit=limit,
        )
        logger.info(f"Compiled scan on {self.table_name}: filter={compiled.filter_expression!r}")
        return compiled

    def _between(self, aliases: _AliasTable, bound: RangeBound) -> str:
        ts = aliases.name(self.timestamp_attribute)
        return f"{ts} BETWEEN {aliases.value(bound.start)} AND {aliases.value(bound.end)}"

    @staticmethod
    def _equality_conditions(aliases: _AliasTable, filters: Sequence[Tuple[str, str]]) -> List[str]:
        return [f"{aliases.name(name)} = {aliases.value(value)}" for name, value in filters]

    def _projection(self, aliases: _AliasTable) -> Optional[str]:
        if not self.projection:
            return None
        return ", ".join(aliases.name(attribute) for attribute in self.projection)
