import os

# Settings are read at import time, so the environment must be ready first
os.environ["JWT_SECRET_KEY"] = "test-secret-0123456789abcdef0123456789"
os.environ["JWT_ISSUER"] = "nginx"
os.environ["JWT_VALIDITY_SECONDS"] = "600"
os.environ["RATE_LIMIT_ISSUE"] = "1000/minute"

import pytest  # noqa: E402

from edgeauth.issuer import TokenIssuer  # noqa: E402
from edgeauth.validator import TokenValidator  # noqa: E402

SECRET = "test-secret-0123456789abcdef0123456789"


@pytest.fixture
def issuer():
    return TokenIssuer(SECRET)


@pytest.fixture
def validator():
    return TokenValidator(SECRET)
