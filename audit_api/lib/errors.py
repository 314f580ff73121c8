"""
Error types for the Audit Query API

Each error carries the HTTP status code it is reported with, so handlers can
turn any of them into a response without inspecting the type.
"""


class AuditQueryError(Exception):
    """Base exception for audit query errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ClientError(AuditQueryError):
    """Raised for underspecified queries, corrupt cursors or missing parameters (HTTP 400)."""

    status_code = 400


class NotFoundError(AuditQueryError):
    """Raised when the named table or index does not exist (HTTP 404)."""

    status_code = 404


class ServerError(AuditQueryError):
    """Raised for any other store or serialization failure (HTTP 500)."""

    status_code = 500
