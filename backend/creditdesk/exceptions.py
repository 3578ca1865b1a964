"""
Domain Exceptions
Raised by the service layer and mapped to HTTP responses in core.error_handlers.
"""

from fastapi import status


class CreditDeskError(Exception):
    """Base class for errors surfaced directly to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be completed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(CreditDeskError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(CreditDeskError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class InvalidArgumentError(CreditDeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid argument"


class UnauthorizedError(CreditDeskError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class ForbiddenError(CreditDeskError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class ProviderError(CreditDeskError):
    """The external search provider failed or refused the request."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Search provider unavailable"
