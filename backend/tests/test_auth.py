# tests/test_auth.py
from datetime import timedelta

import pytest
from jose import jwt
from pydantic import ValidationError

from clinic_queue.config.settings import Settings
from clinic_queue.core.auth import PasswordHasher, TokenService
from clinic_queue.core.exceptions import InvalidCredentials

from tests.conftest import SECRET


def test_hash_is_salted_and_verifies(hasher):
    first = hasher.hash("s3cret!")
    second = hasher.hash("s3cret!")
    assert first != "s3cret!"
    assert first != second
    assert hasher.verify("s3cret!", first)
    assert hasher.verify("s3cret!", second)
    assert not hasher.verify("wrong", first)


def test_work_factor_is_configurable():
    hashed = PasswordHasher(rounds=5).hash("pw")
    assert hashed.startswith("$2b$05$")


@pytest.mark.parametrize("bad_hash", ["", "not-a-hash", "$2b$04$short"])
def test_malformed_hash_is_a_mismatch(hasher, bad_hash):
    assert hasher.verify("anything", bad_hash) is False


def test_token_round_trip(tokens):
    token = tokens.issue(42, email="ann@clinic.com", role="user")
    claims = tokens.verify(token)
    assert claims.subject == 42
    assert claims.email == "ann@clinic.com"
    assert claims.role == "user"


def test_subject_is_signed_as_string(tokens):
    token = tokens.issue(42, email="ann@clinic.com", role="user")
    assert jwt.get_unverified_claims(token)["sub"] == "42"
    # a string subject comes back as the same int
    assert tokens.verify(tokens.issue("42")).subject == 42


def test_token_lifetime_is_24_hours(tokens):
    claims = tokens.verify(tokens.issue(1))
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)
    assert tokens.lifetime_seconds == 86400


def test_tampered_signature_is_rejected(tokens):
    header, payload, signature = tokens.issue(1, role="admin").split(".")
    forged_first = "A" if signature[0] != "A" else "B"
    tampered = ".".join([header, payload, forged_first + signature[1:]])
    with pytest.raises(InvalidCredentials):
        tokens.verify(tampered)


def test_token_from_another_secret_is_rejected(tokens):
    foreign = TokenService("some-other-secret", "HS256").issue(1, role="admin")
    with pytest.raises(InvalidCredentials):
        tokens.verify(foreign)


def test_expired_token_is_rejected(tokens):
    token = tokens.issue(1, expires_delta=timedelta(seconds=-10))
    with pytest.raises(InvalidCredentials):
        tokens.verify(token)


def test_algorithm_mismatch_is_rejected(tokens):
    token = TokenService(SECRET, "HS512").issue(1)
    with pytest.raises(InvalidCredentials):
        tokens.verify(token)


def test_garbage_token_is_rejected(tokens):
    with pytest.raises(InvalidCredentials) as exc_info:
        tokens.verify("definitely.not.ajwt")
    assert exc_info.value.headers == {"WWW-Authenticate": "Bearer"}


def test_numeric_subject_is_accepted(tokens):
    token = jwt.encode({"sub": 42, "exp": 9999999999}, SECRET, algorithm="HS256")
    assert tokens.verify(token).subject == 42


def test_missing_subject_is_rejected(tokens):
    token = jwt.encode({"exp": 9999999999}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredentials):
        tokens.verify(token)


@pytest.mark.parametrize("subject", ["alice", 4.5, True, None])
def test_non_numeric_subject_is_rejected(tokens, subject):
    token = jwt.encode({"sub": subject, "exp": 9999999999}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidCredentials):
        tokens.verify(token)


def test_token_service_requires_secret_and_algorithm():
    with pytest.raises(ValueError):
        TokenService("", "HS256")
    with pytest.raises(ValueError):
        TokenService(SECRET, "")


@pytest.mark.parametrize("missing", ["JWT_SECRET_KEY", "JWT_ALGORITHM"])
def test_settings_fail_fast_without_jwt_config(monkeypatch, missing):
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./x.db")
    monkeypatch.setenv("JWT_SECRET_KEY", SECRET)
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")
    monkeypatch.delenv(missing)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)
