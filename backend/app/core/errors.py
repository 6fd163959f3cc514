"""
Service error taxonomy.

Services raise these; app.main turns them into ``{"error": <message>}``
responses with the matching status code. Messages are public; never put
query text or internal state in them.
"""
from fastapi import status


class ServiceError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Malformed, missing or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Unauthenticated(ServiceError):
    """Missing, malformed or unknown credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class Forbidden(ServiceError):
    """Caller is known but not entitled to the action."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class NotFound(ServiceError):
    """Referenced entity does not exist (or is not visible to the caller)."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(ServiceError):
    """Duplicate of a unique value or relation."""

    # The public API reports duplicates as plain bad requests.
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already exists"
