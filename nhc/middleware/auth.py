"""
Authentication middleware for protected routes.

Validates session tokens and attaches the user to requests.
"""

import logging
from typing import Optional

from fastapi import Request

from common.auth import JWTAuth, InvalidTokenError, TokenExpiredError
from common.utils.exceptions import UnauthorizedException
from config.messages import ErrorMessages
from nhc.services.user.user_service import UserService

logger = logging.getLogger(__name__)


class AuthMiddleware:
    """
    Resolves the caller from the bearer token.
    """

    def __init__(self, jwt_auth: JWTAuth, user_service: UserService):
        """
        Initialize AuthMiddleware.

        Args:
            jwt_auth: For token validation
            user_service: For loading the token's user
        """
        self._jwt_auth = jwt_auth
        self._user_service = user_service

    async def require_auth(self, request: Request) -> dict:
        """
        Validate request is authenticated.

        Args:
            request: HTTP request object

        Returns:
            User dict attached to request

        Raises:
            UnauthorizedException: No header, invalid or expired token,
                or the token's user no longer exists
        """
        token = self._extract_token(request)

        if not token:
            raise UnauthorizedException(
                message=ErrorMessages.MISSING_TOKEN,
                code="MISSING_TOKEN"
            )

        return await self._authenticate(request, token)

    async def optional_auth(self, request: Request) -> Optional[dict]:
        """
        Attach user if a token is sent, but don't require one.

        Args:
            request: HTTP request object

        Returns:
            User dict if authenticated, None for anonymous requests

        Raises:
            UnauthorizedException: A token was sent but is invalid or expired
        """
        token = self._extract_token(request)

        if not token:
            return None

        return await self._authenticate(request, token)

    async def _authenticate(self, request: Request, token: str) -> dict:
        try:
            claims = await self._jwt_auth.verify_token(token)
        except TokenExpiredError:
            raise UnauthorizedException(
                message=ErrorMessages.TOKEN_EXPIRED,
                code="TOKEN_EXPIRED"
            )
        except InvalidTokenError as e:
            logger.debug(f"Rejected token: {e}")
            raise UnauthorizedException(
                message=ErrorMessages.INVALID_TOKEN,
                code="INVALID_TOKEN"
            )

        user = await self._user_service.get_by_id(claims["sub"])
        if not user:
            raise UnauthorizedException(
                message=ErrorMessages.INVALID_TOKEN,
                code="USER_NOT_FOUND"
            )

        request.state.user = user
        return user

    def _extract_token(self, request: Request) -> Optional[str]:
        """
        Extract bearer token from Authorization header.

        Expected format: "Authorization: Bearer <token>"
        """
        auth_header = request.headers.get("Authorization")

        if not auth_header:
            return None

        parts = auth_header.split()

        if len(parts) != 2:
            return None

        scheme, token = parts

        if scheme.lower() != "bearer":
            return None

        return token
