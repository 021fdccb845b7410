"""
Unit tests for password hashing and token issue / verification.
"""

from datetime import datetime, timedelta, timezone

import pytest

from knockturn.auth.auth_errors import MissingSecretError
from knockturn.auth.auth_models import TokenStatus
from knockturn.auth.credential_service import CredentialService


USER = {"id": "7f0c2a4e-1111-4c4c-9d9d-000000000001", "username": "kiruba", "role": "ADMIN"}


def _clock(offset: timedelta):
    return lambda: datetime.now(timezone.utc) + offset


# =============================================================================
# Construction
# =============================================================================

@pytest.mark.parametrize("secret", ["", "   ", None])
def test_missing_secret_is_fatal(secret):
    with pytest.raises(MissingSecretError):
        CredentialService(secret)


# =============================================================================
# Passwords
# =============================================================================

def test_hash_then_verify(credentials):
    hashed = credentials.hash_password("s3cret!")

    assert hashed != "s3cret!"
    assert credentials.verify_password("s3cret!", hashed) is True


def test_hash_uses_cost_factor_10(credentials):
    hashed = credentials.hash_password("s3cret!")

    assert hashed.startswith("$2b$10$")


def test_wrong_password_is_false(credentials):
    hashed = credentials.hash_password("correct horse")

    assert credentials.verify_password("battery staple", hashed) is False


def test_same_password_hashes_differently(fast_credentials):
    first = fast_credentials.hash_password("repeat")
    second = fast_credentials.hash_password("repeat")

    assert first != second
    assert fast_credentials.verify_password("repeat", first)
    assert fast_credentials.verify_password("repeat", second)


@pytest.mark.parametrize("stored", [None, "", "plaintext-not-a-hash", "$2b$10$tooshort"])
def test_unreadable_stored_hash_is_false(fast_credentials, stored):
    assert fast_credentials.verify_password("anything", stored) is False


# =============================================================================
# Tokens
# =============================================================================

def test_issue_then_verify_round_trip(credentials):
    token = credentials.issue_token(USER)
    payload = credentials.verify_token(token)

    assert payload is not None
    assert payload.id == USER["id"]
    assert payload.username == "kiruba"
    assert payload.role == "ADMIN"


@pytest.mark.parametrize("role", [None, ""])
def test_missing_role_defaults_to_user(credentials, role):
    token = credentials.issue_token({"id": "u-1", "username": "nobody", "role": role})

    assert credentials.verify_token(token).role == "user"


def test_record_without_role_key(credentials):
    token = credentials.issue_token({"id": "u-2", "username": "norole"})

    assert credentials.verify_token(token).role == "user"


def test_issue_accepts_objects(credentials):
    class Row:
        id = "u-3"
        username = "object-user"
        role = "EMPLOYEE"

    payload = credentials.verify_token(credentials.issue_token(Row()))

    assert payload.username == "object-user"
    assert payload.role == "EMPLOYEE"


@pytest.mark.parametrize("role", ["admin", "hr", "employee", "Team Lead"])
def test_stored_role_carried_unchanged(credentials, role):
    token = credentials.issue_token({"id": "u-4", "username": "x", "role": role})

    result = credentials.check_token(token)

    assert result.status is TokenStatus.VALID
    assert result.payload.role == role


@pytest.mark.parametrize(
    "record",
    [
        {"username": "no-id"},
        {"id": None, "username": "null-id"},
        {"id": "", "username": "blank-id"},
        {"id": "u-5"},
        {"id": "u-5", "username": ""},
    ],
)
def test_record_without_identity_refused(credentials, record):
    with pytest.raises(ValueError):
        credentials.issue_token(record)


def test_token_has_seven_day_window(credentials):
    from jose import jwt

    claims = jwt.get_unverified_claims(credentials.issue_token(USER))

    assert claims["exp"] - claims["iat"] == 7 * 24 * 3600
    assert claims["sub"] == USER["id"]
    assert "password" not in claims


def test_expired_token_rejected():
    issuer = CredentialService("secret", clock=_clock(-timedelta(days=7, seconds=30)))
    checker = CredentialService("secret")
    token = issuer.issue_token(USER)

    assert checker.verify_token(token) is None
    assert checker.check_token(token).status is TokenStatus.EXPIRED


def test_token_near_end_of_window_still_valid():
    issuer = CredentialService("secret", clock=_clock(-timedelta(days=6, hours=23)))
    checker = CredentialService("secret")

    assert checker.verify_token(issuer.issue_token(USER)) is not None


class MovableClock:
    def __init__(self):
        self.now = datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


def test_one_service_uses_its_clock_for_expiry():
    clock = MovableClock()
    service = CredentialService("secret", clock=clock)
    token = service.issue_token(USER)

    clock.now += timedelta(days=6, hours=23)
    assert service.verify_token(token) is not None

    clock.now += timedelta(hours=2)
    assert service.verify_token(token) is None
    assert service.check_token(token).status is TokenStatus.EXPIRED


def test_token_without_exp_is_malformed():
    from jose import jwt

    token = jwt.encode({"sub": "u-1", "username": "x"}, "secret", algorithm="HS256")

    assert CredentialService("secret").check_token(token).status is TokenStatus.MALFORMED


def test_other_secret_rejected(credentials):
    token = CredentialService("some-other-secret").issue_token(USER)

    assert credentials.verify_token(token) is None
    assert credentials.check_token(token).status is TokenStatus.INVALID


def test_tampered_payload_rejected(credentials):
    header, _, signature = credentials.issue_token(USER).split(".")
    _, forged_payload, _ = credentials.issue_token(dict(USER, username="mallory")).split(".")
    forged = ".".join([header, forged_payload, signature])

    assert credentials.verify_token(forged) is None
    assert credentials.check_token(forged).status is TokenStatus.INVALID


@pytest.mark.parametrize("garbage", [None, "", "not-a-token", 12345])
def test_malformed_token(credentials, garbage):
    assert credentials.verify_token(garbage) is None
    assert credentials.check_token(garbage).status is TokenStatus.MALFORMED


def test_check_token_valid(credentials):
    result = credentials.check_token(credentials.issue_token(USER))

    assert result.ok
    assert result.status is TokenStatus.VALID
    assert result.payload.username == "kiruba"


# =============================================================================
# authenticate
# =============================================================================

def test_authenticate(fast_credentials):
    user = dict(USER, password=fast_credentials.hash_password("pw"))

    token = fast_credentials.authenticate(user, "pw")

    assert fast_credentials.verify_token(token).id == USER["id"]
    assert fast_credentials.authenticate(user, "wrong") is None
    assert fast_credentials.authenticate(None, "pw") is None
