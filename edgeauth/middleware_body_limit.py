# edgeauth/middleware_body_limit.py

"""
Middleware enforcing a maximum request body size.

Claims bodies are small; anything larger than the configured limit is
rejected before the issuer ever parses it.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """
    Rejects any request whose Content-Length exceeds `max_content_length`.

    Returns HTTP 413 (Payload Too Large) if the limit is exceeded and 400 if
    Content-Length is not a number.

    Example usage:
        app.add_middleware(BodySizeLimitMiddleware, max_content_length=65_536)
    """
    def __init__(self, app, max_content_length: int):
        """
        Args:
            app: ASGI application instance.
            max_content_length (int): Max content length in bytes.
        """
        super().__init__(app)
        self.max_content_length = max_content_length

    async def dispatch(self, request: Request, call_next):
        content_length = request.headers.get("content-length")

        if content_length:
            try:
                length = int(content_length)
            except ValueError:
                return JSONResponse(
                    status_code=400,
                    content={"detail": "Invalid Content-Length header"}
                )
            if length > self.max_content_length:
                return too_large_response()

        return await call_next(request)


class BodyTooLarge(Exception):
    """Raised by `read_limited_body` once more than the allowed bytes arrive."""


async def read_limited_body(request: Request, max_content_length: int) -> bytes:
    """
    Read the request body, stopping as soon as it grows past the limit.

    Chunked requests carry no Content-Length, so the middleware above cannot
    reject them up front; this bounds what is actually buffered.

    Raises:
        BodyTooLarge: If the body exceeds `max_content_length` bytes.
    """
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_content_length:
            raise BodyTooLarge()
    return bytes(body)


def too_large_response() -> JSONResponse:
    return JSONResponse(
        status_code=413,
        content={"detail": "Request body too large"}
    )
