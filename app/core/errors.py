from fastapi import HTTPException


class BookingError(Exception):
    """Base class for errors raised by the booking core."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BookingError):
    status_code = 404


class UnauthorizedError(BookingError):
    status_code = 403


class InvalidTransitionError(BookingError):
    status_code = 400


class ValidationError(BookingError):
    status_code = 400


class ConcurrentUpdateError(BookingError):
    status_code = 409


def raise_http(exc: BookingError):
    """Convert a core error into the HTTP response the routes return."""
    raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc
