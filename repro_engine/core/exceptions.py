"""Engine exceptions.

Each exception carries a machine-readable error code, a details dict and an
HTTP status hint for the controller layer that wraps this package. Storage
failures are not wrapped: SQLAlchemy errors propagate unchanged after rollback.
"""

from typing import Any


class ReproEngineError(Exception):
    """Base exception for all engine errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. protocol_id, column).
    """

    http_status = 500

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)


class ProtocolNotFoundError(ReproEngineError):
    """Raised when a protocol id does not resolve (optionally within a tenant)."""

    http_status = 404

    def __init__(self, protocol_id: Any) -> None:
        super().__init__(
            f"Protocol not found: {protocol_id}",
            "PROTOCOL_NOT_FOUND",
            {"protocol_id": protocol_id},
        )


class InvalidProtocolError(ReproEngineError):
    """Raised when a protocol resolves to zero steps."""

    http_status = 400

    def __init__(self, protocol_id: Any, message: str = "Protocol has no steps") -> None:
        super().__init__(message, "INVALID_PROTOCOL", {"protocol_id": protocol_id})


class InvalidDateError(ReproEngineError, ValueError):
    """Raised when a date literal is neither YYYY-MM-DD nor DD/MM/YYYY."""

    http_status = 400

    def __init__(self, value: Any) -> None:
        super().__init__(
            f"Invalid date {value!r} (use YYYY-MM-DD or DD/MM/YYYY)",
            "INVALID_DATE",
            {"value": value},
        )


class SchemaIncompleteError(ReproEngineError):
    """Raised when a required physical column cannot be resolved."""

    def __init__(self, table: str, fields: list[str]) -> None:
        super().__init__(
            f"Table {table!r} is missing required column(s): {', '.join(fields)}",
            "SCHEMA_INCOMPLETE",
            {"table": table, "fields": fields},
        )
