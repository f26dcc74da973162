# edgeauth/signer.py

"""
HMAC-SHA256 signing and verification for token signatures.

A raw secret is first imported as an `HmacKey` that records which
operations it may be used for. Signing and verification are delegated to
PyJWT's `HMACAlgorithm`, whose `verify` compares digests with
`hmac.compare_digest` (constant time).

All three operations are coroutines: the digest is computed in Starlette's
threadpool so a request task yields while the cryptographic work runs.

🔐 Keys are immutable. One key per process is shared read-only by every
request task.
"""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable

from jwt.algorithms import HMACAlgorithm
from jwt.exceptions import InvalidKeyError
from starlette.concurrency import run_in_threadpool

from edgeauth.exceptions import KeyUsageError


class KeyUsage(str, Enum):
    SIGN = "sign"
    VERIFY = "verify"


@dataclass(frozen=True)
class HmacKey:
    """
    Imported symmetric key material.

    Attributes:
        material (bytes): Raw secret bytes.
        usages (FrozenSet[KeyUsage]): Operations this key may perform.
    """
    material: bytes
    usages: FrozenSet[KeyUsage]

    def __repr__(self) -> str:
        # never print secret bytes
        names = sorted(u.value for u in self.usages)
        return f"HmacKey(usages={names})"


class HmacSigner:
    """
    Computes and checks HMAC-SHA256 signatures.
    """

    def __init__(self) -> None:
        self._algorithm = HMACAlgorithm(HMACAlgorithm.SHA256)

    async def import_key(
        self,
        secret: str | bytes,
        usages: Iterable[KeyUsage] = (KeyUsage.SIGN, KeyUsage.VERIFY),
    ) -> HmacKey:
        """
        Import a raw secret as an HMAC key.

        Args:
            secret (str | bytes): Shared secret; text is UTF-8 encoded.
            usages (Iterable[KeyUsage]): Operations the key is allowed for.

        Returns:
            HmacKey: The imported key.

        Raises:
            InvalidKeyError: If the secret is empty or looks like asymmetric
                key material (PEM / SSH public keys).
        """
        material = await run_in_threadpool(self._algorithm.prepare_key, secret)
        if not material:
            raise InvalidKeyError("HMAC secret must not be empty")
        return HmacKey(material=material, usages=frozenset(usages))

    async def sign(self, key: HmacKey, message: bytes) -> bytes:
        """
        Compute HMAC-SHA256(key, message).

        Raises:
            KeyUsageError: If `key` was not imported for signing.
        """
        _require(key, KeyUsage.SIGN)
        return await run_in_threadpool(self._algorithm.sign, message, key.material)

    async def verify(self, key: HmacKey, signature: bytes, message: bytes) -> bool:
        """
        Check `signature` against HMAC-SHA256(key, message).

        Returns False on any length or content mismatch; only key misuse raises.

        Raises:
            KeyUsageError: If `key` was not imported for verification.
        """
        _require(key, KeyUsage.VERIFY)
        return await run_in_threadpool(
            self._algorithm.verify, message, key.material, signature
        )


def _require(key: HmacKey, usage: KeyUsage) -> None:
    if usage not in key.usages:
        raise KeyUsageError(f"key is not usable for '{usage.value}'")
