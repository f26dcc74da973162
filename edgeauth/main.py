# edgeauth/main.py

"""
Main entry point for the Edge Auth FastAPI service.

This file defines:
- Startup key import (fails fast on unusable secrets)
- Security, correlation-id, logging and body-size middlewares
- `POST /jwt`: issue a signed HS256 token from JSON claims
- `GET|POST /validate`: verify a bearer token and surface its subject
- `GET /hello`: diagnostic echo of request metadata
- Health probes and Prometheus metrics

🧠 Routes only translate between Starlette objects and the plain values the
handlers in `edgeauth.handlers` work with; all token logic lives there.
"""

import logging
import os
import time

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Depends, FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from jwt.exceptions import InvalidKeyError

# ─── Rate Limiting ─────────────────────────────────────────────────────────────
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

# ─── Metrics / Prometheus ──────────────────────────────────────────────────────
from prometheus_client import (
    CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram,
    generate_latest, multiprocess
)

from edgeauth.config import settings
from edgeauth.dependencies import get_issuer, get_validator
from edgeauth.exceptions import TokenError
from edgeauth.handlers import Reply, handle_issue, handle_validate
from edgeauth.issuer import TokenIssuer
from edgeauth.logging_config import configure_logging
from edgeauth.middleware_body_limit import (
    BodySizeLimitMiddleware, BodyTooLarge, read_limited_body, too_large_response
)
from edgeauth.middleware_security import SecurityHeadersMiddleware
from edgeauth.middlewares import LoggingMiddleware
from edgeauth.validator import TokenValidator

logger = logging.getLogger("edgeauth")

# ───────────────────────────────────────────────────────────────────────────────
# Prometheus Metrics — track request volume and latency per method + path
# ───────────────────────────────────────────────────────────────────────────────
REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "http_status"]
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"]
)

# ───────────────────────────────────────────────────────────────────────────────
# Application Startup
# ───────────────────────────────────────────────────────────────────────────────
configure_logging(settings.log_level)

app = FastAPI(
    title="Edge Auth",
    version="0.1.0",
    description="Issues and validates HS256 JSON Web Tokens at the web edge."
)


@app.on_event("startup")
async def import_keys():
    """
    Import the signing and verification keys once, so a structurally invalid
    secret stops the process instead of failing the first request.
    """
    try:
        await get_issuer().key()
        await get_validator().key()
    except InvalidKeyError as e:
        raise RuntimeError("JWT_SECRET_KEY is not usable as an HMAC key") from e
    logger.info("token keys imported", extra={"issuer": settings.jwt_issuer})


def to_response(request: Request, operation: str, reply: Reply) -> PlainTextResponse:
    # picked up by LoggingMiddleware for the access log line
    request.state.token_operation = operation
    request.state.token_outcome = reply.outcome
    return PlainTextResponse(reply.body, status_code=reply.status_code, headers=reply.headers)

# ───────────────────────────────────────────────────────────────────────────────
# Global Exception Handling
# ───────────────────────────────────────────────────────────────────────────────
@app.exception_handler(TokenError)
async def handle_token_error(request: Request, exc: TokenError):
    """
    Render a rejection that escaped a handler as a single plain-text reply.
    """
    return PlainTextResponse(exc.detail, status_code=exc.status_code)

# ───────────────────────────────────────────────────────────────────────────────
# Middleware Stack
# ───────────────────────────────────────────────────────────────────────────────
app.add_middleware(CorrelationIdMiddleware)
app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(BodySizeLimitMiddleware, max_content_length=settings.max_body_bytes)

# ───────────────────────────────────────────────────────────────────────────────
# Rate Limiting
# ───────────────────────────────────────────────────────────────────────────────
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# ───────────────────────────────────────────────────────────────────────────────
# Prometheus Middleware
# ───────────────────────────────────────────────────────────────────────────────
@app.middleware("http")
async def metrics_middleware(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    elapsed = time.time() - start

    REQUEST_LATENCY.labels(method=request.method, endpoint=request.url.path).observe(elapsed)
    REQUEST_COUNT.labels(
        method=request.method,
        endpoint=request.url.path,
        http_status=str(response.status_code),
    ).inc()

    return response

@app.get("/metrics", include_in_schema=False)
async def metrics():
    """
    Prometheus endpoint for scraping runtime stats.
    Supports both single- and multi-process environments.
    """
    mp_dir = os.getenv("PROMETHEUS_MULTIPROC_DIR")
    if mp_dir and os.path.isdir(mp_dir):
        registry = CollectorRegistry()
        multiprocess.MultiProcessCollector(registry)
        data = generate_latest(registry)
    else:
        data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)

# ───────────────────────────────────────────────────────────────────────────────
# Health Probes
# ───────────────────────────────────────────────────────────────────────────────
@app.get("/healthz", tags=["health"])
async def healthz():
    """
    Liveness probe. No dependencies.
    """
    return {"status": "ok"}


@app.get("/readyz", tags=["health"])
async def readyz(
    issuer: TokenIssuer = Depends(get_issuer),
    validator: TokenValidator = Depends(get_validator),
):
    """
    Readiness probe — the configured secret imports as signing and verification keys.
    """
    try:
        await issuer.key()
        await validator.key()
    except InvalidKeyError as e:
        return JSONResponse(
            content={"ready": False, "errors": {"key": str(e)}},
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return {"ready": True}

# ───────────────────────────────────────────────────────────────────────────────
# Token Endpoints
# ───────────────────────────────────────────────────────────────────────────────
@app.post("/jwt", response_class=PlainTextResponse, tags=["token"])
@limiter.limit(settings.rate_limit_issue)
async def issue_token(request: Request, issuer: TokenIssuer = Depends(get_issuer)):
    """
    Issue a token. The body is a JSON object of claims; `iss` and `exp` are set here.
    """
    try:
        body = await read_limited_body(request, settings.max_body_bytes)
    except BodyTooLarge:
        return too_large_response()

    reply = await handle_issue(request.headers.get("content-type"), body, issuer)
    return to_response(request, "issue", reply)


@app.api_route("/validate", methods=["GET", "POST"], response_class=PlainTextResponse, tags=["token"])
async def validate_token(request: Request, validator: TokenValidator = Depends(get_validator)):
    """
    Validate the bearer token in the Authorization header.
    """
    reply = await handle_validate(request.headers.get("authorization"), validator)
    return to_response(request, "validate", reply)

# ───────────────────────────────────────────────────────────────────────────────
# Diagnostics
# ───────────────────────────────────────────────────────────────────────────────
@app.get("/hello", tags=["diagnostics"])
async def hello(request: Request):
    """
    Echo request metadata back to the caller. Credentials are not echoed.
    """
    headers = " ".join(
        f"{k} = {'<redacted>' if k == 'authorization' else v}"
        for k, v in request.headers.items()
    )
    args = " ".join(f"{k} = {v}" for k, v in request.query_params.items())
    return {
        "Message": "Hello from Edge Auth!",
        "Method": request.method,
        "HTTP Version": request.scope.get("http_version"),
        "Remote Address": request.client.host if request.client else None,
        "URI": request.url.path,
        "Req-Headers": headers,
        "Args": args,
    }
