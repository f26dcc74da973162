# edgeauth/schemas.py

"""
Pydantic data models shared by the issuer, the validator and the HTTP layer.

- `TokenHeader`: the fixed JOSE header of every issued token
- `ValidationResult`: outcome of checking a bearer token
"""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, ConfigDict

from edgeauth.exceptions import ErrorKind


class TokenHeader(BaseModel):
    """
    Fixed `{"typ": "JWT", "alg": "HS256"}` header. Field order is the
    serialization order.
    """
    model_config = ConfigDict(frozen=True)

    typ: Literal["JWT"] = "JWT"
    alg: Literal["HS256"] = "HS256"


class ValidationResult(BaseModel):
    """
    Outcome of `TokenValidator.validate`.

    Fields:
        ok (bool): Whether the token was accepted.
        subject (str | None): The `sub` claim, when the claims carried one.
        claims (dict | None): Decoded claims, when they parsed as a JSON object.
        reason (ErrorKind | None): Why the token was rejected (only when `ok` is False).
    """
    model_config = ConfigDict(frozen=True)

    ok: bool
    subject: Optional[str] = None
    claims: Optional[Dict[str, Any]] = None
    reason: Optional[ErrorKind] = None

    @classmethod
    def success(
        cls,
        subject: Optional[str] = None,
        claims: Optional[Dict[str, Any]] = None,
    ) -> "ValidationResult":
        # decoded claims may hold lone surrogates, which str validation rejects
        return cls.model_construct(ok=True, subject=subject, claims=claims)

    @classmethod
    def failure(cls, reason: ErrorKind) -> "ValidationResult":
        return cls.model_construct(ok=False, reason=reason)
