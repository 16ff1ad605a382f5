"""
Domain errors raised by the service layer.

Each error is an ``HTTPException`` carrying its own status code, so FastAPI
renders it directly as ``{"detail": message}``.  Services raise these for
expected outcomes (missing rows, ownership mismatch, duplicates) and only
translate unexpected storage failures into ``InternalError``.
"""
from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError


class PostServiceError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message


class ConflictError(PostServiceError):
    status_code = status.HTTP_409_CONFLICT


class NotFoundError(PostServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(PostServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class InternalError(PostServiceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


_UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """Return True when *exc* was raised by a UNIQUE constraint."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    # SQLite reports constraint kinds only in the message.
    return "UNIQUE constraint failed" in str(orig)
