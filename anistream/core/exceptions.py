# anistream/core/exceptions.py
from __future__ import annotations

"""
AniStream: Application error taxonomy
======================================

Every failure that reaches a client is one of these. Each maps to a fixed HTTP
status and renders as `{"message": str, "error"?: str | dict}`.

    ValidationError  400  malformed/missing input (field map in `error`)
    ConflictError    400  uniqueness clash (duplicate username, ...)
    AuthError        401  no/invalid/expired session
    ForbiddenError   403  authenticated but not allowed
    NotFoundError    404  referenced id absent
    InternalError    500  unexpected store/driver failure (diagnostic in `error`)
"""

from typing import Any, Dict, List, Optional, Union

from fastapi import HTTPException, status

ErrorDetail = Union[str, Dict[str, List[str]], None]


class AppException(HTTPException):
    """Base class for all application errors rendered by `app_exception_handler`."""

    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_default: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error: ErrorDetail = None,
        status_code: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        self.message = message or self.message_default
        self.error = error
        super().__init__(status_code=status_code or self.status_code_default, detail=self.message, headers=headers)

    def to_body(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(status={self.status_code}, message={self.message!r})"


class ValidationError(AppException):
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_default = "Validation failed"

    @classmethod
    def for_field(cls, field: str, problem: str, message: Optional[str] = None) -> "ValidationError":
        return cls(message, error={field: [problem]})


class ConflictError(AppException):
    status_code_default = status.HTTP_400_BAD_REQUEST
    message_default = "Already exists"


class AuthError(AppException):
    status_code_default = status.HTTP_401_UNAUTHORIZED
    message_default = "Unauthorized"


class ForbiddenError(AppException):
    status_code_default = status.HTTP_403_FORBIDDEN
    message_default = "Forbidden"


class NotFoundError(AppException):
    status_code_default = status.HTTP_404_NOT_FOUND
    message_default = "Not found"


class InternalError(AppException):
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    message_default = "Internal server error"

    @classmethod
    def from_exc(cls, message: str, exc: BaseException) -> "InternalError":
        """Wrap an unexpected failure, keeping its text as a best-effort diagnostic."""
        return cls(message, error=str(exc) or exc.__class__.__name__)


__all__ = [
    "AppException",
    "ValidationError",
    "ConflictError",
    "AuthError",
    "ForbiddenError",
    "NotFoundError",
    "InternalError",
]
