# edgeauth/middleware_security.py

"""
Security middleware adding protective HTTP headers to every response.

- `Content-Security-Policy: default-src 'self'`
- `Cache-Control: no-store`, because token responses must never be cached
  by a shared proxy

FastAPI's docs routes are skipped so their UI (which pulls external assets)
keeps working.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Injects Content-Security-Policy and Cache-Control headers.
    """
    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(("/docs", "/redoc", "/openapi.json")):
            return await call_next(request)

        response: Response = await call_next(request)
        response.headers["Content-Security-Policy"] = "default-src 'self'"
        response.headers.setdefault("Cache-Control", "no-store")
        return response
