"""
Security headers middleware.

Adds HTTP Strict Transport Security outside development so browsers
only reach the API over HTTPS.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

HSTS_VALUE = "max-age=63072000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, enable_hsts: bool = True):
        super().__init__(app)
        self._enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        if self._enable_hsts:
            response.headers["Strict-Transport-Security"] = HSTS_VALUE
        return response
