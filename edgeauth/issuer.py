# edgeauth/issuer.py

"""
Issues signed HS256 tokens from caller-supplied claims.

Issuance steps:
1. Parse the raw claims text as a JSON object
2. Merge in the reserved `iss` and `exp` claims (reserved values win)
3. Serialize header and claims as compact JSON and base64url-encode them
4. Sign the `header.claims` region and append the encoded signature

The same routine serves sign-only and sign+verify deployments; the key
usages it imports its key with are a constructor argument.
"""

import json
import logging
import math
import re
import time
from typing import Any, Dict, Iterable

from edgeauth import codec
from edgeauth.exceptions import ErrorKind, TokenError
from edgeauth.schemas import TokenHeader
from edgeauth.signer import HmacKey, HmacSigner, KeyUsage

logger = logging.getLogger("edgeauth.issuer")

DEFAULT_ISSUER = "nginx"
DEFAULT_VALIDITY_SECONDS = 600

# json.loads joins valid surrogate pairs, so any left over are unpaired
_LONE_SURROGATE = re.compile("[\ud800-\udfff]")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def to_json(obj: Any) -> str:
    """
    Compact JSON text in mapping order, non-ASCII kept as-is.

    Unpaired surrogates are written as `\\uXXXX` escapes so the text stays
    encodable as UTF-8. NaN and infinities are refused.
    """
    text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
    return _LONE_SURROGATE.sub(lambda m: "\\u%04x" % ord(m.group()), text)


def parse_claims(raw_claims: str | bytes) -> Dict[str, Any]:
    """
    Parse caller claims, which must be a JSON object.

    Raises:
        TokenError(INVALID_CLAIMS_JSON): If the text is not JSON or not an object.
    """
    try:
        claims = json.loads(raw_claims, parse_constant=_reject_constant)
    except (TypeError, ValueError, RecursionError) as e:
        raise TokenError(ErrorKind.INVALID_CLAIMS_JSON) from e
    if not isinstance(claims, dict):
        raise TokenError(ErrorKind.INVALID_CLAIMS_JSON)
    return claims


class TokenIssuer:
    """
    Builds, serializes and signs tokens with a process-wide secret.

    Args:
        secret (str | bytes): Shared HMAC secret.
        issuer (str): Value of the reserved `iss` claim.
        validity_seconds (int): Added to the issuance time to form `exp`.
        key_usages (Iterable[KeyUsage]): Usages the signing key is imported with.
        signer (HmacSigner | None): Signature primitive; a fresh one by default.
    """

    def __init__(
        self,
        secret: str | bytes,
        issuer: str = DEFAULT_ISSUER,
        validity_seconds: int = DEFAULT_VALIDITY_SECONDS,
        key_usages: Iterable[KeyUsage] = (KeyUsage.SIGN, KeyUsage.VERIFY),
        signer: HmacSigner | None = None,
    ) -> None:
        self.issuer = issuer
        self.validity_seconds = validity_seconds
        self.key_usages = frozenset(key_usages)
        self._secret = secret
        self._signer = signer or HmacSigner()
        self._key: HmacKey | None = None

    async def key(self) -> HmacKey:
        """
        Import the secret on first use; later calls return the same key.
        """
        if self._key is None:
            self._key = await self._signer.import_key(self._secret, self.key_usages)
        return self._key

    def build_claims(self, claims: Dict[str, Any], now: float) -> Dict[str, Any]:
        merged = dict(claims)
        merged["iss"] = self.issuer
        merged["exp"] = math.floor(now) + self.validity_seconds
        return merged

    async def issue(self, raw_claims: str | bytes, now: float | None = None) -> str:
        """
        Issue a signed token for the given claims.

        Args:
            raw_claims (str | bytes): JSON object text with the caller's claims.
            now (float | None): Issuance time in Unix seconds; defaults to the clock.

        Returns:
            str: `header.claims.signature`, each segment unpadded base64url.

        Raises:
            TokenError(INVALID_CLAIMS_JSON): If `raw_claims` is not a JSON object.
        """
        claims = parse_claims(raw_claims)
        if now is None:
            now = time.time()
        claims = self.build_claims(claims, now)

        header = TokenHeader().model_dump()
        try:
            signed_region = ".".join(
                codec.encode(to_json(part).encode("utf-8")) for part in (header, claims)
            )
        except (ValueError, RecursionError) as e:
            raise TokenError(ErrorKind.INVALID_CLAIMS_JSON) from e
        signature = await self._signer.sign(await self.key(), signed_region.encode("ascii"))

        logger.debug("token issued", extra={"exp": claims["exp"]})
        return f"{signed_region}.{codec.encode(signature)}"
