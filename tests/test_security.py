# tests/test_security.py
from datetime import timedelta

import pytest
from jose import jwt

from account_service.errors import AuthError
from account_service.models import utcnow
from account_service.security import TokenIssuer, hash_password, verify_password

SECRET = "unit-test-secret"


def test_password_hash_is_salted_and_verifiable():
    first = hash_password("secret")
    second = hash_password("secret")

    assert first != "secret"
    assert first != second
    assert verify_password("secret", first)
    assert verify_password("secret", second)
    assert not verify_password("Secret", first)
    assert not verify_password("secret", None)


def test_issue_and_decode_round_trip():
    tokens = TokenIssuer(SECRET)
    token = tokens.issue(42, "admin")

    claims = tokens.decode(token)
    assert claims["sub"] == "42"
    assert claims["role"] == "admin"
    assert claims["exp"] - claims["iat"] == 60 * 60
    assert tokens.account_id(token) == 42


def test_decode_rejects_other_secret():
    token = TokenIssuer("someone-else").issue(1)
    with pytest.raises(AuthError) as excinfo:
        TokenIssuer(SECRET).decode(token)
    assert excinfo.value.status_code == 401


def test_decode_rejects_expired_token():
    stale = TokenIssuer(SECRET, expire_minutes=60, clock=lambda: utcnow() - timedelta(hours=2))
    token = stale.issue(1)
    with pytest.raises(AuthError) as excinfo:
        TokenIssuer(SECRET).decode(token)
    assert excinfo.value.message == "Token expired"


def test_decode_rejects_token_without_expiry_or_subject():
    no_exp = jwt.encode({"sub": "1"}, SECRET, algorithm="HS256")
    no_sub = jwt.encode(
        {"exp": utcnow() + timedelta(minutes=5)}, SECRET, algorithm="HS256"
    )
    tokens = TokenIssuer(SECRET)
    for token in (no_exp, no_sub, "garbage"):
        with pytest.raises(AuthError):
            tokens.decode(token)


def test_account_id_rejects_non_numeric_subject():
    token = jwt.encode(
        {"sub": "abc", "exp": utcnow() + timedelta(minutes=5)}, SECRET, algorithm="HS256"
    )
    with pytest.raises(AuthError):
        TokenIssuer(SECRET).account_id(token)


def test_issuer_requires_secret():
    with pytest.raises(ValueError):
        TokenIssuer("")
