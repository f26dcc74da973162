import json

import jwt
import pytest

from edgeauth import codec
from edgeauth.exceptions import ErrorKind, TokenError
from edgeauth.issuer import TokenIssuer
from edgeauth.signer import KeyUsage

SECRET = "test-secret-0123456789abcdef0123456789"

T = 1_700_000_000


def segments(token):
    header, claims, signature = token.split(".")
    return json.loads(codec.decode(header)), codec.decode(claims).decode("utf-8"), signature


@pytest.mark.asyncio
async def test_issue_encodes_fixed_header_and_merged_claims(issuer):
    token = await issuer.issue('{"sub":"alice"}', now=T)

    header, claims_text, signature = segments(token)
    assert header == {"typ": "JWT", "alg": "HS256"}
    assert claims_text == '{"sub":"alice","iss":"nginx","exp":%d}' % (T + 600)
    assert signature
    assert "=" not in token


@pytest.mark.asyncio
async def test_reserved_claims_override_caller_values(issuer):
    token = await issuer.issue('{"iss": "attacker", "exp": 1}', now=T)

    _, claims_text, _ = segments(token)
    claims = json.loads(claims_text)
    assert claims == {"iss": "nginx", "exp": T + 600}


@pytest.mark.asyncio
async def test_fractional_time_is_floored(issuer):
    token = await issuer.issue("{}", now=T + 0.9)
    _, claims_text, _ = segments(token)
    assert json.loads(claims_text)["exp"] == T + 600


@pytest.mark.asyncio
async def test_issuer_and_validity_are_configurable():
    issuer = TokenIssuer(SECRET, issuer="edge", validity_seconds=60)
    token = await issuer.issue('{"role": "admin"}', now=T)
    _, claims_text, _ = segments(token)
    assert json.loads(claims_text) == {"role": "admin", "iss": "edge", "exp": T + 60}


@pytest.mark.asyncio
async def test_non_ascii_claims_are_kept_as_utf8(issuer):
    token = await issuer.issue('{"name": "Zoë"}', now=T)
    _, claims_text, _ = segments(token)
    assert '"name":"Zoë"' in claims_text


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    "", "not json", "{\"sub\": ", "[1, 2]", "\"alice\"", "42", "null",
    "{\"a\": NaN}", "{\"a\": Infinity}", "{\"a\": -Infinity}",
])
async def test_issue_rejects_bodies_that_are_not_json_objects(issuer, body):
    with pytest.raises(TokenError) as exc_info:
        await issuer.issue(body, now=T)
    assert exc_info.value.kind is ErrorKind.INVALID_CLAIMS_JSON
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_sign_only_key_usage_still_issues():
    issuer = TokenIssuer(SECRET, key_usages=(KeyUsage.SIGN,))
    token = await issuer.issue("{}", now=T)
    assert token.count(".") == 2
    assert (await issuer.key()).usages == frozenset({KeyUsage.SIGN})


@pytest.mark.asyncio
async def test_tokens_decode_with_pyjwt(issuer):
    token = await issuer.issue('{"sub": "alice", "scope": ["read"]}')

    payload = jwt.decode(token, SECRET, algorithms=["HS256"], issuer="nginx")
    assert payload["sub"] == "alice"
    assert payload["scope"] == ["read"]


@pytest.mark.asyncio
async def test_deeply_nested_claims_are_rejected(issuer):
    body = '{"a":' + "[" * 1_000_000 + "]" * 1_000_000 + "}"
    with pytest.raises(TokenError) as exc_info:
        await issuer.issue(body, now=T)
    assert exc_info.value.kind is ErrorKind.INVALID_CLAIMS_JSON


@pytest.mark.asyncio
async def test_lone_surrogate_is_escaped_in_claims(issuer, validator):
    token = await issuer.issue('{"sub":"\\ud800"}', now=T)

    _, claims_text, _ = segments(token)
    assert claims_text == '{"sub":"\\ud800","iss":"nginx","exp":%d}' % (T + 600)

    result = await validator.validate(f"Bearer {token}")
    assert result.ok is True
    assert result.claims["sub"] == "\ud800"


@pytest.mark.asyncio
async def test_surrogate_pairs_stay_literal(issuer):
    token = await issuer.issue('{"emoji":"\\ud83d\\ude00"}', now=T)
    _, claims_text, _ = segments(token)
    assert '"emoji":"\U0001F600"' in claims_text
