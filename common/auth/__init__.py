"""
Authentication module - JWT session tokens and password hashing.
"""

from common.auth.jwt_auth import JWTAuth, InvalidTokenError, TokenExpiredError

__all__ = ["JWTAuth", "InvalidTokenError", "TokenExpiredError"]
