"""
HTTP exceptions carrying a machine-readable error code.

Every client-facing failure (4xx, and 503 when a dependency is down)
is raised as one of these. The global handler turns them into the
standard error envelope; any other exception becomes a generic 500.

Example:
    from common.utils import NotFoundException

    if not question:
        raise NotFoundException("Question not found", code="QUESTION_NOT_FOUND")
"""

from typing import Optional, Any, Dict

from fastapi import HTTPException


class APIException(HTTPException):
    """
    Base class for API errors.

    Subclasses set status_code, default_message and default_code; the
    resulting detail is {"message", "code", "details"?}.
    """

    status_code: int = 500
    default_message: str = "Error"
    default_code: Optional[str] = None

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        details: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        status_code: Optional[int] = None,
    ):
        """
        Args:
            message: Human-readable message shown to the user
            code: Machine-readable code, e.g. "ORGANIZATION_EXISTS"
            details: Per-field errors or other structured context
            headers: Extra response headers
            status_code: Overrides the class status for one-off errors
        """
        self.message = message or self.default_message
        self.code = code or self.default_code

        detail: Dict[str, Any] = {"message": self.message}
        if self.code:
            detail["code"] = self.code
        if details is not None:
            detail["details"] = details

        super().__init__(
            status_code=status_code or self.status_code,
            detail=detail,
            headers=headers,
        )


class BadRequestException(APIException):
    status_code = 400
    default_message = "Bad request"
    default_code = "BAD_REQUEST"


class UnauthorizedException(APIException):
    status_code = 401
    default_message = "Unauthorized"
    default_code = "UNAUTHORIZED"


class ForbiddenException(APIException):
    status_code = 403
    default_message = "Forbidden"
    default_code = "FORBIDDEN"


class NotFoundException(APIException):
    status_code = 404
    default_message = "Not found"
    default_code = "NOT_FOUND"


class NotAcceptableException(APIException):
    """Raised when the caller's data can't satisfy the request (e.g. no e-mail shared)."""

    status_code = 406
    default_message = "Not acceptable"
    default_code = "NOT_ACCEPTABLE"


class ConflictException(APIException):
    status_code = 409
    default_message = "Conflict"
    default_code = "CONFLICT"


class InternalServerException(APIException):
    status_code = 500
    default_message = "Internal server error"
    default_code = "INTERNAL_ERROR"


class ServiceUnavailableException(APIException):
    """A downstream service (mail queue, OAuth provider) can't take the request."""

    status_code = 503
    default_message = "Service unavailable"
    default_code = "SERVICE_UNAVAILABLE"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[str] = None,
        retry_after: Optional[int] = None,
    ):
        super().__init__(
            message=message,
            code=code,
            details={"retryAfter": retry_after} if retry_after else None,
            headers={"Retry-After": str(retry_after)} if retry_after else None,
        )
