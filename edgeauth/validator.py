# edgeauth/validator.py

"""
Bearer token validation.

`TokenValidator.validate` walks a fixed sequence of checks and stops at the
first one that fails:

1. Header presence      → MissingAuthHeader
2. `Bearer <value>`     → NotBearerScheme
3. Three segments       → MalformedToken
4. HMAC signature       → InvalidSignature
5. Claims extraction    (best-effort, never fails the request)

⚠️ The `exp` claim is not checked: an expired but correctly signed token is
accepted. Enforcing expiry is a behavior change and must be made explicitly.
"""

import json
import logging
from typing import Any, Dict, Optional

from edgeauth import codec
from edgeauth.exceptions import DecodeError, ErrorKind
from edgeauth.schemas import ValidationResult
from edgeauth.signer import HmacKey, HmacSigner, KeyUsage

logger = logging.getLogger("edgeauth.validator")


def extract_claims(segment: str) -> Optional[Dict[str, Any]]:
    """
    Decode a claims segment, or return None if it is not a base64url JSON object.
    """
    try:
        claims = json.loads(codec.decode(segment))
    except (DecodeError, ValueError, RecursionError):
        return None
    return claims if isinstance(claims, dict) else None


def subject_of(claims: Optional[Dict[str, Any]]) -> Optional[str]:
    """
    The `sub` claim as text, or None when absent or empty.
    """
    if not claims or not claims.get("sub"):
        return None
    sub = claims["sub"]
    return sub if isinstance(sub, str) else json.dumps(sub, separators=(",", ":"))


class TokenValidator:
    """
    Verifies bearer tokens signed with the process-wide secret.

    Args:
        secret (str | bytes): Shared HMAC secret.
        signer (HmacSigner | None): Signature primitive; a fresh one by default.
    """

    def __init__(self, secret: str | bytes, signer: HmacSigner | None = None) -> None:
        self._secret = secret
        self._signer = signer or HmacSigner()
        self._key: HmacKey | None = None

    async def key(self) -> HmacKey:
        if self._key is None:
            self._key = await self._signer.import_key(self._secret, (KeyUsage.VERIFY,))
        return self._key

    async def validate(self, authorization: Optional[str]) -> ValidationResult:
        """
        Validate an `Authorization` header value.

        Args:
            authorization (str | None): Raw header value, e.g. "Bearer a.b.c".

        Returns:
            ValidationResult: `ok` with the subject and claims, or the failure reason.
        """
        if not authorization:
            return ValidationResult.failure(ErrorKind.MISSING_AUTH_HEADER)

        values = authorization.split(" ")
        if len(values) != 2 or values[0] != "Bearer":
            return ValidationResult.failure(ErrorKind.NOT_BEARER_SCHEME)

        parts = values[1].split(".")
        if len(parts) != 3 or not all(parts):
            return ValidationResult.failure(ErrorKind.MALFORMED_TOKEN)

        header_b64, claims_b64, signature_b64 = parts
        try:
            signature = codec.decode(signature_b64)
        except DecodeError:
            logger.debug("signature segment is not base64url")
            return ValidationResult.failure(ErrorKind.INVALID_SIGNATURE)

        signed_region = f"{header_b64}.{claims_b64}".encode("utf-8")
        if not await self._signer.verify(await self.key(), signature, signed_region):
            return ValidationResult.failure(ErrorKind.INVALID_SIGNATURE)

        claims = extract_claims(claims_b64)
        return ValidationResult.success(subject=subject_of(claims), claims=claims)
