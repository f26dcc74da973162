import json
import time

import pytest

from edgeauth import codec
from edgeauth.exceptions import ErrorKind
from edgeauth.signer import HmacSigner
from edgeauth.validator import TokenValidator, extract_claims, subject_of

T = 1_700_000_000


def flip(segment, index):
    ch = segment[index]
    return segment[:index] + ("A" if ch != "A" else "B") + segment[index + 1:]


@pytest.mark.asyncio
async def test_round_trip_surfaces_subject_and_claims(issuer, validator):
    token = await issuer.issue('{"sub":"alice","role":"admin"}', now=T)

    result = await validator.validate(f"Bearer {token}")

    assert result.ok is True
    assert result.reason is None
    assert result.subject == "alice"
    assert result.claims == {"sub": "alice", "role": "admin", "iss": "nginx", "exp": T + 600}


@pytest.mark.asyncio
async def test_round_trip_without_subject(issuer, validator):
    token = await issuer.issue('{"role":"admin"}', now=T)
    result = await validator.validate(f"Bearer {token}")
    assert result.ok is True
    assert result.subject is None


@pytest.mark.asyncio
@pytest.mark.parametrize("part", [0, 1])
async def test_tampering_with_signed_region_is_detected(issuer, validator, part):
    token = await issuer.issue('{"sub":"alice"}', now=T)
    parts = token.split(".")

    for index in range(len(parts[part])):
        tampered = list(parts)
        tampered[part] = flip(parts[part], index)
        result = await validator.validate("Bearer " + ".".join(tampered))
        assert result.ok is False
        assert result.reason is ErrorKind.INVALID_SIGNATURE


@pytest.mark.asyncio
async def test_token_from_other_key_is_rejected(issuer):
    token = await issuer.issue('{"sub":"alice"}', now=T)
    result = await TokenValidator("another-secret").validate(f"Bearer {token}")
    assert result.ok is False
    assert result.reason is ErrorKind.INVALID_SIGNATURE


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [None, ""])
async def test_missing_header(validator, value):
    result = await validator.validate(value)
    assert result.reason is ErrorKind.MISSING_AUTH_HEADER
    assert result.reason.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [
    "Basic abc",
    "bearer a.b.c",
    "Bearer",
    "Bearer  a.b.c",
    "Bearer a.b.c extra",
    "Token a.b.c",
])
async def test_scheme_must_be_bearer_with_one_value(validator, value):
    result = await validator.validate(value)
    assert result.reason is ErrorKind.NOT_BEARER_SCHEME
    assert result.reason.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [
    "Bearer a.b",
    "Bearer a.b.c.d",
    "Bearer a..c",
    "Bearer .b.c",
    "Bearer a.b.",
    "Bearer abc",
])
async def test_token_must_have_three_segments(validator, value):
    result = await validator.validate(value)
    assert result.reason is ErrorKind.MALFORMED_TOKEN
    assert result.reason.status_code == 400


@pytest.mark.asyncio
async def test_undecodable_signature_is_an_invalid_signature(issuer, validator):
    token = await issuer.issue("{}", now=T)
    header, claims, _ = token.split(".")
    result = await validator.validate(f"Bearer {header}.{claims}.not+base64url")
    assert result.reason is ErrorKind.INVALID_SIGNATURE


@pytest.mark.asyncio
async def test_expired_token_still_validates(issuer, validator):
    # exp is not enforced; changing this is a deliberate behavior change
    token = await issuer.issue('{"sub":"alice"}', now=time.time() - 86_400)

    result = await validator.validate(f"Bearer {token}")

    assert result.ok is True
    assert result.claims["exp"] < time.time()


@pytest.mark.asyncio
async def test_signed_garbage_claims_are_a_claimless_success(validator):
    # a correctly signed token whose claims segment is not JSON
    signer = HmacSigner()
    key = await signer.import_key("test-secret-0123456789abcdef0123456789")
    header = codec.encode(b'{"typ":"JWT","alg":"HS256"}')
    claims = codec.encode(b"not json")
    signature = await signer.sign(key, f"{header}.{claims}".encode())

    result = await validator.validate(f"Bearer {header}.{claims}.{codec.encode(signature)}")

    assert result.ok is True
    assert result.subject is None
    assert result.claims is None


def test_extract_claims_is_best_effort():
    assert extract_claims(codec.encode(b'{"sub":"bob"}')) == {"sub": "bob"}
    assert extract_claims(codec.encode(b"[1,2]")) is None
    assert extract_claims(codec.encode(b"\xc3\x28{}")) is None
    assert extract_claims("not base64!") is None
    assert extract_claims(codec.encode(b"[" * 1_000_000 + b"]" * 1_000_000)) is None


def test_subject_of_renders_non_string_values():
    assert subject_of({"sub": "alice"}) == "alice"
    assert subject_of({"sub": 42}) == "42"
    assert subject_of({"sub": ""}) is None
    assert subject_of({"iss": "nginx"}) is None
    assert subject_of(None) is None


