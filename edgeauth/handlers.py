# edgeauth/handlers.py

"""
Request boundary for the issue and validate endpoints.

Handlers take plain header and body values and return a `Reply`, so they
can be exercised without an HTTP server. `main.py` turns a `Reply` into a
Starlette response.

Each handler calls exactly one of `TokenIssuer.issue` or
`TokenValidator.validate` and returns on the first rejection.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

from prometheus_client import Counter

from edgeauth.exceptions import ErrorKind, TokenError
from edgeauth.issuer import TokenIssuer
from edgeauth.validator import TokenValidator

logger = logging.getLogger("edgeauth.handlers")

TOKENS_TOTAL = Counter(
    "edgeauth_tokens_total",
    "Token operations by outcome",
    ["operation", "outcome"]
)

JSON_MEDIA_TYPE = "application/json"
SUBJECT_HEADER = "Claims-sub"


@dataclass
class Reply:
    """
    Status, text body and extra headers to send back to the client.

    `outcome` is "ok" or the `ErrorKind` value; it is only used for logging
    and metrics and never sent to the client.
    """
    status_code: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)
    outcome: str = "ok"

    @classmethod
    def rejection(cls, kind: ErrorKind) -> "Reply":
        return cls(kind.status_code, kind.detail, outcome=kind.value)


def media_type(content_type: Optional[str]) -> str:
    """
    The `type/subtype` part of a Content-Type value, lowercased.
    """
    if not content_type:
        return ""
    return content_type.split(";", 1)[0].strip().lower()


async def handle_issue(
    content_type: Optional[str],
    body: str | bytes,
    issuer: TokenIssuer,
) -> Reply:
    """
    Issue a token for a JSON claims body.

    Args:
        content_type (str | None): Request Content-Type header.
        body (str | bytes): Raw request body.
        issuer (TokenIssuer): Token issuer bound to the configured secret.

    Returns:
        Reply: 200 with the token, or 400 on a bad Content-Type or body.
    """
    if media_type(content_type) != JSON_MEDIA_TYPE:
        return _reject("issue", ErrorKind.BAD_CONTENT_TYPE)

    try:
        token = await issuer.issue(body)
    except TokenError as e:
        return _reject("issue", e.kind)

    TOKENS_TOTAL.labels(operation="issue", outcome="ok").inc()
    return Reply(200, token)


async def handle_validate(
    authorization: Optional[str],
    validator: TokenValidator,
) -> Reply:
    """
    Validate a bearer token.

    Args:
        authorization (str | None): Request Authorization header.
        validator (TokenValidator): Validator bound to the configured secret.

    Returns:
        Reply: 200 with body `true` and a `Claims-sub` header when the token
        names a subject; 400/401 with a diagnostic message otherwise.
    """
    result = await validator.validate(authorization)
    if not result.ok:
        return _reject("validate", result.reason)

    TOKENS_TOTAL.labels(operation="validate", outcome="ok").inc()
    headers = {}
    if result.subject and _header_safe(result.subject):
        headers[SUBJECT_HEADER] = result.subject
    elif result.subject:
        logger.warning("subject claim not representable as a header value")
    return Reply(200, "true", headers)


def _header_safe(value: str) -> bool:
    # header values are latin-1 on the wire and may not fold lines
    if "\r" in value or "\n" in value:
        return False
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return True


def _reject(operation: str, kind: ErrorKind) -> Reply:
    logger.warning(
        "token request rejected",
        extra={"operation": operation, "error_kind": kind.value, "status": kind.status_code},
    )
    TOKENS_TOTAL.labels(operation=operation, outcome=kind.value).inc()
    return Reply.rejection(kind)
