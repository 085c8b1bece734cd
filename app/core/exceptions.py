"""
Service-level errors raised by the ride, session, trip and account components.

Each error carries the HTTP status code the API layer answers with. Handlers
never catch these to retry; callers decide what to do with them.
"""

from fastapi import status


class ServiceError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """Ride, trip, user, session or profile does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class UnauthorizedError(ServiceError):
    """Caller is not the ride's counterpart, or credentials were rejected."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidStateError(ServiceError):
    """Status precondition violated."""

    status_code = status.HTTP_409_CONFLICT


class ConflictError(ServiceError):
    """Uniqueness violated: duplicate feedback, phone number or active driver device."""

    status_code = status.HTTP_409_CONFLICT


class ValidationError(ServiceError):
    """Malformed input that passed schema validation, e.g. a non 4-digit PIN."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class NoOngoingTripError(NotFoundError):
    def __init__(self, message: str = "No ongoing trip found."):
        super().__init__(message)


class EstimatedFareMissingError(InvalidStateError):
    def __init__(self, message: str = "Estimated fare not found for this trip."):
        super().__init__(message)
