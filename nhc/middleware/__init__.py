"""
Middleware for request authentication, error rendering and response headers.
"""

from nhc.middleware.auth import AuthMiddleware
from nhc.middleware.error_handler import setup_error_handlers
from nhc.middleware.security_headers import SecurityHeadersMiddleware

__all__ = ["AuthMiddleware", "setup_error_handlers", "SecurityHeadersMiddleware"]
