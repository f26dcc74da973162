# edgeauth/config.py

"""
Configuration module for the Edge Auth token service.

Runtime configuration is defined with Pydantic's `BaseSettings` class, so
every value is read from the environment (or a `.env` file) and validated
at startup.

This config powers:
- The shared HMAC secret used to sign and verify tokens
- The reserved `iss` claim and the token validity window
- Rate limits and request body limits
- Log verbosity

🔐 The secret has no default. Inject `JWT_SECRET_KEY` from your secret store
(environment variable, or a file in a directory passed as `_secrets_dir`,
e.g. `/run/secrets` for Docker/Kubernetes secrets).
"""

from pydantic import ConfigDict, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ─── Secrets (required from .env, environment or secrets dir) ──────────────
    jwt_secret_key: str      # Shared HMAC-SHA256 secret for signing and verifying

    # ─── Token Claims ──────────────────────────────────────────────────────────
    jwt_issuer: str = "nginx"          # Value of the reserved `iss` claim
    jwt_validity_seconds: int = 600    # Added to issuance time to form `exp`

    # ─── Request Limits ────────────────────────────────────────────────────────
    # Format must be "<count>/<unit>", e.g. "10/minute"
    rate_limit_issue: str = "60/minute"   # Token issuance endpoint rate limit
    max_body_bytes: int = 65_536          # Largest accepted claims body

    # ─── Logging ───────────────────────────────────────────────────────────────
    log_level: str = "INFO"

    # ─── Pydantic Global Configuration ─────────────────────────────────────────
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ─── Validators ────────────────────────────────────────────────────────────
    @field_validator("jwt_secret_key")
    @classmethod
    def check_secret(cls, v: str) -> str:
        if not v:
            raise ValueError("JWT_SECRET_KEY must not be empty")
        return v

    @field_validator("jwt_validity_seconds")
    @classmethod
    def check_validity(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("token validity must be a positive number of seconds")
        return v

    @field_validator("rate_limit_issue")
    @classmethod
    def check_rate_limit_format(cls, v: str) -> str:
        """
        Validates rate limit string format: must include a "/" (e.g., "30/minute").
        """
        if "/" not in v:
            raise ValueError("rate limits must be of form `<num>/<unit>`, e.g. `30/minute`")
        return v


# Instantiate a singleton config object, importable throughout the app
settings = Settings()
