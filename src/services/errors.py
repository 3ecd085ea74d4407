from __future__ import annotations

import logging
from typing import NoReturn

from src.adapters.booking_engine_client import BookingEngineError
from src.orchestrator.operations import Operation

logger = logging.getLogger(__name__)

DEFAULT_ERROR_STATUS = 500


class ClassifiedError(Exception):
    """The only failure shape returned to API callers."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    def to_dict(self) -> dict:
        return {"statusCode": self.status_code, "message": self.message}


class NotFoundError(ClassifiedError):
    def __init__(self, message: str) -> None:
        super().__init__(404, message)


class UnauthorizedError(ClassifiedError):
    def __init__(self, message: str = "Authentication credentials were not provided or are invalid.") -> None:
        super().__init__(401, message)


def fallback_message(operation: Operation) -> str:
    if operation is Operation.MARK_NO_SHOW:
        return "Error while marking no-show."
    return f"Error while {operation.verb} {operation.label}."


def classify(error: object, operation: Operation) -> NoReturn:
    """Raise the outward error for a failure that happened during ``operation``."""
    fallback = fallback_message(operation)

    if isinstance(error, ClassifiedError):
        classified = error
    elif isinstance(error, BookingEngineError):
        classified = ClassifiedError(
            error.status_code or DEFAULT_ERROR_STATUS,
            error.message or fallback,
        )
    elif isinstance(error, Exception):
        classified = ClassifiedError(DEFAULT_ERROR_STATUS, str(error) or fallback)
    else:
        classified = ClassifiedError(DEFAULT_ERROR_STATUS, fallback)

    if classified.status_code >= 500:
        exc_info = error if isinstance(error, BaseException) else None
        logger.error("%s failed: %s", operation.value, classified.message, exc_info=exc_info)
    else:
        logger.warning("%s rejected (%s): %s", operation.value, classified.status_code, classified.message)

    if classified is not error and isinstance(error, BaseException):
        raise classified from error
    raise classified
