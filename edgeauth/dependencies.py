# edgeauth/dependencies.py

"""
Dependency providers for FastAPI endpoints in the Edge Auth service.

These helpers are used with FastAPI's `Depends()` to hand each request the
process-wide `TokenIssuer` / `TokenValidator`. Both are built once from
`settings` and shared by every request; they hold no mutable state beyond
their write-once imported key.

Tests replace them through `app.dependency_overrides`.
"""

from functools import lru_cache

from edgeauth.config import settings
from edgeauth.issuer import TokenIssuer
from edgeauth.signer import HmacSigner
from edgeauth.validator import TokenValidator


@lru_cache
def get_signer() -> HmacSigner:
    return HmacSigner()


@lru_cache
def get_issuer() -> TokenIssuer:
    """
    FastAPI dependency returning the configured token issuer.
    """
    return TokenIssuer(
        settings.jwt_secret_key,
        issuer=settings.jwt_issuer,
        validity_seconds=settings.jwt_validity_seconds,
        signer=get_signer(),
    )


@lru_cache
def get_validator() -> TokenValidator:
    """
    FastAPI dependency returning the configured token validator.
    """
    return TokenValidator(settings.jwt_secret_key, signer=get_signer())
