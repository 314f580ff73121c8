"""
Pydantic response models for the Audit Query API

Usage:
    from audit_api.lib.response_models import QueryPageResponse

    page = QueryPageResponse(items=[{"auditId": "a1"}], nextToken="eyJ...")
    body = page.model_dump(by_alias=True, exclude_none=True)
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============================================================================
# Entity Models
# ============================================================================


class AuditItem(BaseModel):
    """Audit record from the user audit table.

    Attributes are typed loosely since any stored value decodes to JSON;
    undeclared attributes pass through unchanged.
    """

    user_id: Optional[Any] = Field(None, alias="userId", description="userId-index hash key")
    application_id: Optional[Any] = Field(
        None, alias="applicationId", description="applicationId-index hash key"
    )
    resource_id: Optional[Any] = Field(None, alias="resourceId", description="resourceId-index hash key")
    audit_id: Optional[Any] = Field(None, alias="auditId")
    event_timestamp: Optional[Any] = Field(None, alias="eventTimestamp")
    system_id: Optional[Any] = Field(None, alias="systemId")
    system_name: Optional[Any] = Field(None, alias="systemName")
    environment: Optional[Any] = None
    email: Optional[Any] = None
    role: Optional[Any] = None
    action_type: Optional[Any] = Field(None, alias="actionType")
    resource_type: Optional[Any] = Field(None, alias="resourceType")
    action_description: Optional[Any] = Field(None, alias="actionDescription")
    data_before: Optional[Any] = Field(None, alias="dataBefore")
    data_after: Optional[Any] = Field(None, alias="dataAfter")
    # Numbers are decoded as strings
    retention_period_in_years: Optional[Any] = Field(None, alias="retentionPeriodInYears")
    deletion_date: Optional[Any] = Field(None, alias="deletionDate")

    model_config = ConfigDict(populate_by_name=True, extra="allow")


class AuditLogItem(BaseModel):
    """Audit log entry as returned by the audit-log endpoints.

    The declared fields are the projection; PK_SystemDate, SK_AuditDetails,
    retention_years and deletion_date stay hidden.
    """

    audit_id: Optional[Any] = None
    timestamp: Optional[Any] = None
    system_id: Optional[Any] = None
    system_name: Optional[Any] = None
    user_id: Optional[Any] = None
    resource_type: Optional[Any] = None
    resource_id: Optional[Any] = None
    action_type: Optional[Any] = None
    action_description: Optional[Any] = None
    data_before: Optional[Any] = None
    data_after: Optional[Any] = None

    model_config = ConfigDict(extra="ignore")


# Attributes requested by the audit-log entry points, in response order
AUDIT_LOG_FIELDS = tuple(AuditLogItem.model_fields)


def shape_items(model, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Render decoded items through a response model.

    Only attributes present on the stored item are emitted, so a stored NULL
    comes back as null and an absent attribute stays absent.
    """
    return [
        model.model_validate(item).model_dump(mode="json", by_alias=True, exclude_unset=True)
        for item in items
    ]


# ============================================================================
# Response Bodies
# ============================================================================


class QueryPageResponse(BaseModel):
    """One page of query results"""

    items: List[Dict[str, Any]] = Field(..., description="Decoded items in store order")
    next_token: Optional[str] = Field(
        None, alias="nextToken", description="Cursor for the next page (absent when exhausted)"
    )

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "items": [{"auditId": "a1", "userId": "u1"}],
                "nextToken": "eyJhdWRpdElkIjp7IlMiOiJhMSJ9fQ==",
            }
        },
    )


class ErrorResponse(BaseModel):
    """Error body"""

    error: str = Field(..., description="Human-readable error message")

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "Must include one of: userId, applicationId, resourceId"}}
    )
