# edgeauth/middlewares.py

"""
Access logging middleware with correlation IDs.

`LoggingMiddleware` logs one line per request with:
- HTTP method
- Path
- Status code
- Response time (ms)
- Request ID (from `asgi-correlation-id`, or a fallback UUID)
- Token operation (`issue` / `validate`) and its outcome, on token routes

Header values are not logged: the Authorization header carries a credential.
"""

import logging
import time
import uuid
from typing import Dict

from asgi_correlation_id import correlation_id
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request and its outcome under the "edgeauth.access" logger.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        logger = logging.getLogger("edgeauth.access")

        # Use correlation ID if available, otherwise generate a fallback UUID
        request_id = correlation_id.get() or str(uuid.uuid4())

        try:
            response: Response = await call_next(request)
        except Exception:
            duration = (time.perf_counter() - start) * 1000
            logger.exception(
                "unhandled exception",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": 500,
                    "duration_ms": round(duration, 2),
                    "request_id": request_id,
                },
            )
            raise

        duration = (time.perf_counter() - start) * 1000
        logger.info(
            "request completed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration, 2),
                "request_id": request_id,
                **token_fields(request),
            },
        )
        return response


def token_fields(request: Request) -> Dict[str, str]:
    """
    Token operation and outcome recorded by the `/jwt` and `/validate` routes.

    Returns an empty dict for requests that did not touch a token.
    """
    operation = getattr(request.state, "token_operation", None)
    if operation is None:
        return {}
    return {
        "token_operation": operation,
        "token_outcome": getattr(request.state, "token_outcome", "ok"),
    }
