"""
Client-facing error types.

Services raise these exceptions; the handler registered in
``main.create_app`` turns them into JSON responses of the form
``{"error": "<message>"}`` with the carried HTTP status.  A plan that
does not exist and a plan owned by someone else both surface as
``NotFoundError`` so that callers cannot probe for other users' data.
"""

from typing import Optional

from fastapi import status


class ClientError(Exception):
    """An error that is reported to the API caller as-is."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class BadRequestError(ClientError):
    status_code = status.HTTP_400_BAD_REQUEST


class UnauthorizedError(ClientError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(ClientError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ClientError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ClientError):
    status_code = status.HTTP_409_CONFLICT
