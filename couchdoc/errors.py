"""
Service error taxonomy.

Everything the service can detect locally (bad input, missing documents,
bad construction options) is raised as a ServiceError subclass. Errors
coming from the store client propagate unchanged, except KeyNotFoundError
which becomes NotFound.
"""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for errors raised by DocumentService."""

    status_code: int = 500
    default_detail: str = "Service error."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class BadRequest(ServiceError):
    """Caller supplied missing or unusable input."""

    status_code = 400
    default_detail = "Bad request."


class MalformedFilter(BadRequest):
    """Filter has a shape the compiler cannot translate."""

    default_detail = "Malformed filter."


class UnsupportedOperator(BadRequest):
    """Operator mapping contains an operator the compiler does not know."""

    default_detail = "Unsupported operator."

    def __init__(self, operator: str, field: str | None = None) -> None:
        self.operator = operator
        self.field = field
        where = f" on field {field!r}" if field else ""
        super().__init__(f"Unsupported operator {operator!r}{where}.")


class NotFound(ServiceError):
    """No document is stored under the derived key."""

    status_code = 404
    default_detail = "Does not exist."


class ConfigurationError(ServiceError):
    """Service was constructed with invalid options."""

    default_detail = "Invalid service configuration."
