"""Domain errors raised by the shop services and mapped to HTTP responses in ``main``."""

from fastapi import status


class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(DomainError):
    """Duplicate data or a stale revision of the shop document."""

    status_code = status.HTTP_409_CONFLICT


class InvalidTransitionError(ConflictError):
    pass


class NoActiveMembership(DomainError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, detail: str = "El cliente no tiene una membresía activa"):
        super().__init__(detail)


class CloudUnavailableError(DomainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str):
        super().__init__(f"Error Cloud: {message}")
