# edgeauth/exceptions.py

"""
Error kinds and exception classes for the Edge Auth token service.

Every way a token request can be rejected is named by an `ErrorKind`.
Each kind carries the HTTP status and the diagnostic message returned to
the client, so the request boundary never has to decide them twice.

Exception types:
- `TokenError`: a rejection carrying an `ErrorKind`
- `DecodeError`: base64url text outside the alphabet
- `KeyUsageError`: a key used for an operation it was not imported for

🧠 `TokenError` is also caught by a FastAPI exception handler in `main.py`,
so a rejection that escapes a handler still yields exactly one response.
"""

from enum import Enum

from jwt.exceptions import InvalidKeyError


class ErrorKind(str, Enum):
    """
    Named rejection reasons with their HTTP status and client message.
    """
    BAD_CONTENT_TYPE = "BadContentType"
    INVALID_CLAIMS_JSON = "InvalidClaimsJson"
    MISSING_AUTH_HEADER = "MissingAuthHeader"
    NOT_BEARER_SCHEME = "NotBearerScheme"
    MALFORMED_TOKEN = "MalformedToken"
    INVALID_SIGNATURE = "InvalidSignature"

    @property
    def status_code(self) -> int:
        return _STATUS[self]

    @property
    def detail(self) -> str:
        return _DETAIL[self]


_STATUS = {
    ErrorKind.BAD_CONTENT_TYPE: 400,
    ErrorKind.INVALID_CLAIMS_JSON: 400,
    ErrorKind.MISSING_AUTH_HEADER: 401,
    ErrorKind.NOT_BEARER_SCHEME: 400,
    ErrorKind.MALFORMED_TOKEN: 400,
    ErrorKind.INVALID_SIGNATURE: 401,
}

_DETAIL = {
    ErrorKind.BAD_CONTENT_TYPE: "*** Content-Type must be application/json *** !\n",
    ErrorKind.INVALID_CLAIMS_JSON: "*** Error parsing POST data to JSON *** !\n",
    ErrorKind.MISSING_AUTH_HEADER: "*** Error, missing Authorization header *** !\n",
    ErrorKind.NOT_BEARER_SCHEME: "*** Error, missing Bearer token in Authorization header *** !\n",
    ErrorKind.MALFORMED_TOKEN: "*** Error, Bearer token is not a JWT token *** !\n",
    ErrorKind.INVALID_SIGNATURE: "*** Error, Invalid JWT token *** !\n",
}


class TokenError(Exception):
    """
    Raised when a token request must be rejected.

    Args:
        kind (ErrorKind): Why the request was rejected.

    Example:
        raise TokenError(ErrorKind.INVALID_CLAIMS_JSON)
    """
    def __init__(self, kind: ErrorKind):
        self.kind = kind
        self.status_code = kind.status_code
        self.detail = kind.detail
        super().__init__(kind.value)


class DecodeError(ValueError):
    """Base64url text contains characters outside the alphabet or has an impossible length."""


class KeyUsageError(InvalidKeyError):
    """
    A key was asked to sign or verify without having been imported for that usage.
    """
