"""Session token tests — pure, no database.

Learn: verify_session() takes an explicit `now`, so expiry is tested
at fixed instants instead of by sleeping.
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from coursehub.auth.identity import CurrentIdentity
from coursehub.auth.jwt import create_session_token, verify_session
from coursehub.config import settings
from coursehub.db.models import Role
from coursehub.errors import ExpiredToken, InvalidToken

ISSUED_AT = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)


def test_round_trip():
    user_id = uuid.uuid4()
    token = create_session_token(user_id, Role.INSTRUCTOR)

    identity = verify_session(token)
    assert identity == CurrentIdentity(user_id=user_id, role=Role.INSTRUCTOR)


def test_valid_until_just_before_expiry():
    user_id = uuid.uuid4()
    token = create_session_token(user_id, Role.STUDENT, now=ISSUED_AT)
    window = timedelta(minutes=settings.session_expire_minutes)

    identity = verify_session(token, now=ISSUED_AT + window - timedelta(seconds=1))
    assert identity.user_id == user_id
    assert identity.role is Role.STUDENT


def test_expired_after_window():
    token = create_session_token(uuid.uuid4(), Role.STUDENT, now=ISSUED_AT)
    window = timedelta(minutes=settings.session_expire_minutes)

    with pytest.raises(ExpiredToken):
        verify_session(token, now=ISSUED_AT + window + timedelta(seconds=1))


def test_expired_exactly_at_boundary():
    token = create_session_token(uuid.uuid4(), Role.STUDENT, now=ISSUED_AT, expires_minutes=5)

    with pytest.raises(ExpiredToken):
        verify_session(token, now=ISSUED_AT + timedelta(minutes=5))


def test_tampered_token():
    token = create_session_token(uuid.uuid4(), Role.STUDENT)
    header, payload, signature = token.split(".")
    forged = jwt.encode(
        {"sub": str(uuid.uuid4()), "role": "instructor", "type": "session",
         "iat": 0, "exp": 2**31},
        "some-other-secret-that-is-long-enough-for-hs256",
        algorithm="HS256",
    ).split(".")[1]

    with pytest.raises(InvalidToken):
        verify_session(".".join([header, forged, signature]))


def test_wrong_secret():
    token = jwt.encode(
        {"sub": str(uuid.uuid4()), "role": "student", "type": "session",
         "iat": 0, "exp": 2**31},
        "some-other-secret-that-is-long-enough-for-hs256",
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken):
        verify_session(token)


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c", 42, b"bytes"])
def test_garbage_is_invalid(token):
    with pytest.raises(InvalidToken):
        verify_session(token)


def _signed(claims: dict) -> str:
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def test_bad_role_claim():
    token = _signed({"sub": str(uuid.uuid4()), "role": "admin", "type": "session",
                     "iat": 0, "exp": 2**31})
    with pytest.raises(InvalidToken):
        verify_session(token)


def test_bad_subject_claim():
    token = _signed({"sub": "not-a-uuid", "role": "student", "type": "session",
                     "iat": 0, "exp": 2**31})
    with pytest.raises(InvalidToken):
        verify_session(token)


def test_not_a_session_token():
    token = _signed({"sub": str(uuid.uuid4()), "role": "student", "type": "refresh",
                     "iat": 0, "exp": 2**31})
    with pytest.raises(InvalidToken):
        verify_session(token)


def test_missing_expiry():
    token = _signed({"sub": str(uuid.uuid4()), "role": "student", "type": "session", "iat": 0})
    with pytest.raises(InvalidToken):
        verify_session(token)


def test_zero_minute_window_is_not_the_default():
    token = create_session_token(uuid.uuid4(), Role.STUDENT, now=ISSUED_AT, expires_minutes=0)

    with pytest.raises(ExpiredToken):
        verify_session(token, now=ISSUED_AT)
