"""Domain-level exceptions.

Services raise these errors to express business rule violations.
The API error mapper turns each of them into a fixed HTTP status and body.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    default_message = "Not found"


class RouteNotFound(NotFoundError):
    """No route registered for the method, path and version."""

    default_message = "Route not found"


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""

    default_message = "Already exists"


class UnauthorizedError(DomainError):
    """Caller could not be authenticated."""

    default_message = "Not authenticated"


class PermissionDeniedError(DomainError):
    """Caller lacks permission for the requested action."""

    default_message = "Forbidden"


class ValidationError(DomainError):
    """Input violates a declared parameter schema or a business rule.

    ``errors`` holds one message per offending field.
    """

    default_message = "Validation failed"

    def __init__(self, errors: list[str] | None = None, message: str | None = None):
        self.errors = list(errors or [])
        super().__init__(message)


class PresentationCycleError(DomainError):
    """An entity was reached again while it was still being presented."""

    default_message = "cyclic presentation"
