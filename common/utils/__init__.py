"""
Utilities module - Common helpers for API responses, exceptions, and validation.
"""

from common.utils.responses import success_response, error_response, list_response
from common.utils.exceptions import (
    APIException,
    BadRequestException,
    UnauthorizedException,
    ForbiddenException,
    NotFoundException,
    NotAcceptableException,
    ConflictException,
    InternalServerException,
    ServiceUnavailableException,
)
from common.utils.password import validate_password

__all__ = [
    "success_response",
    "error_response",
    "list_response",
    "APIException",
    "BadRequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "NotFoundException",
    "NotAcceptableException",
    "ConflictException",
    "InternalServerException",
    "ServiceUnavailableException",
    "validate_password",
]
