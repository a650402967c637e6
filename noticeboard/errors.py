"""
Domain exceptions raised by services.

Routers let these propagate; ``noticeboard.main`` renders them into the
``{success: false, message}`` envelope with the matching status code.
"""

from typing import Optional

from fastapi import status


class NoticeBoardError(Exception):
    """Base class for errors that map onto a client-visible outcome."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(NoticeBoardError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ForbiddenError(NoticeBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class ValidationFailedError(NoticeBoardError):
    """Bad input detected before any write happened."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"
