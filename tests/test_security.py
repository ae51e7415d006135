import re
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from chirpy.auth import security
from chirpy.auth.refresh_tokens import generate_refresh_token
from chirpy.core.exceptions import InvalidTokenError

SECRET = "unit-test-signing-secret"


def test_password_hash_round_trip():
    hashed = security.get_password_hash("correctPassword123!")
    assert security.verify_password("correctPassword123!", hashed) is True
    assert security.verify_password("anotherPassword456!", hashed) is False


def test_password_hash_is_salted():
    first = security.get_password_hash("Secret123!")
    second = security.get_password_hash("Secret123!")
    assert first != second
    assert security.verify_password("Secret123!", first)
    assert security.verify_password("Secret123!", second)


def test_password_hash_uses_fixed_cost():
    hashed = security.get_password_hash("Secret123!")
    assert hashed.startswith("$2b$10$")
    assert "Secret123!" not in hashed


def test_verify_against_garbage_hash_is_false():
    assert security.verify_password("correctPassword123!", "test") is False
    assert security.verify_password("correctPassword123!", "") is False


def test_long_password_does_not_fail_hashing():
    password = "x" * 200
    hashed = security.get_password_hash(password)
    assert security.verify_password(password, hashed) is True


def test_only_first_72_bytes_of_password_are_significant():
    hashed = security.get_password_hash("x" * 72 + "a")
    assert security.verify_password("x" * 72 + "b", hashed) is True
    assert security.verify_password("x" * 71 + "b", hashed) is False


def test_dummy_verification_never_matches():
    assert security.verify_password_against_dummy("anything") is False


def test_access_token_round_trip():
    user_id = uuid.uuid4()
    token = security.create_access_token(user_id, security.ACCESS_TOKEN_TTL, SECRET)
    assert security.decode_access_token(token, SECRET) == user_id


def test_access_token_claims():
    user_id = uuid.uuid4()
    token = security.create_access_token(user_id, timedelta(seconds=3600), SECRET)
    claims = jwt.get_unverified_claims(token)
    assert claims["iss"] == "chirpy"
    assert claims["sub"] == str(user_id)
    assert claims["exp"] - claims["iat"] == 3600
    assert jwt.get_unverified_header(token)["alg"] == "HS256"


def test_access_token_with_wrong_secret_is_rejected():
    token = security.create_access_token(uuid.uuid4(), security.ACCESS_TOKEN_TTL, SECRET)
    with pytest.raises(InvalidTokenError):
        security.decode_access_token(token, "some-other-secret")


def test_expired_access_token_is_rejected():
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = security.create_access_token(uuid.uuid4(), security.ACCESS_TOKEN_TTL, SECRET, now=issued)
    with pytest.raises(InvalidTokenError):
        security.decode_access_token(token, SECRET)


def test_tampered_access_token_is_rejected():
    token = security.create_access_token(uuid.uuid4(), security.ACCESS_TOKEN_TTL, SECRET)
    header, _, signature = token.split(".")
    forged = jwt.encode({"iss": "chirpy", "sub": str(uuid.uuid4()), "iat": 0, "exp": 4102444800}, "x", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        security.decode_access_token(".".join([header, forged.split(".")[1], signature]), SECRET)


@pytest.mark.parametrize(
    "claims",
    [
        {"iss": "chirpy", "iat": 0},
        {"iss": "chirpy", "sub": "andy", "iat": 0},
        {"iss": "someone-else", "sub": str(uuid.uuid4()), "iat": 0},
        {"iss": "chirpy", "sub": str(uuid.uuid4())},
    ],
)
def test_malformed_claims_are_rejected(claims):
    now = int(datetime.now(timezone.utc).timestamp())
    payload = {**claims, "exp": now + 600}
    if "iat" in payload:
        payload["iat"] = now
    token = jwt.encode(payload, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        security.decode_access_token(token, SECRET)


def test_garbage_access_token_is_rejected():
    with pytest.raises(InvalidTokenError):
        security.decode_access_token("not-a-jwt", SECRET)


def test_refresh_token_format():
    token = generate_refresh_token()
    assert re.fullmatch(r"[0-9a-f]{64}", token)


def test_refresh_tokens_do_not_repeat():
    tokens = {generate_refresh_token() for _ in range(100_000)}
    assert len(tokens) == 100_000


def test_dummy_verification_does_not_hash(monkeypatch):
    assert security._DUMMY_PASSWORD_HASH.startswith("$2b$10$")

    def fail(password):
        raise AssertionError("dummy check must reuse the prebuilt hash")

    monkeypatch.setattr(security, "get_password_hash", fail)
    assert security.verify_password_against_dummy("anything") is False
