from datetime import timedelta

import jwt
import pytest
from pydantic import ValidationError

from agri_api.core.config import Settings
from agri_api.security.utils import (
    Role,
    create_access_token,
    decode_access_token,
    hash_password,
    now_utc,
    verify_password,
)

CFG = Settings(JWT_SECRET='unit-test-signing-key-0123456789abcdef0123')


def test_token_round_trip_carries_identity_claims():
    token = create_access_token(CFG, subject='jane@farm.co.za', user_id='u-1', role=Role.FARMER)
    claims = decode_access_token(CFG, token)
    assert claims.sub == 'jane@farm.co.za'
    assert claims.nameid == 'u-1'
    assert claims.role is Role.FARMER
    assert claims.iss == CFG.JWT_ISSUER
    assert claims.aud == CFG.JWT_AUDIENCE


def test_token_expires_after_configured_hours():
    before = int(now_utc().timestamp())
    token = create_access_token(CFG, subject='a@b.com', user_id='u-1', role=Role.EMPLOYEE)
    exp = decode_access_token(CFG, token).exp
    expected = before + int(CFG.JWT_EXPIRE_HOURS * 3600)
    assert expected - 5 <= exp <= expected + 5


def test_unknown_role_is_refused_at_issuance():
    with pytest.raises(ValueError):
        create_access_token(CFG, subject='a@b.com', user_id='u-1', role='Admin')


def test_unknown_role_claim_is_refused_at_verification():
    payload = {
        'sub': 'a@b.com', 'nameid': 'u-1', 'role': 'Admin',
        'iss': CFG.JWT_ISSUER, 'aud': CFG.JWT_AUDIENCE,
        'exp': now_utc() + timedelta(hours=1),
    }
    token = jwt.encode(payload, CFG.JWT_SECRET, algorithm=CFG.JWT_ALGORITHM)
    with pytest.raises(ValidationError):
        decode_access_token(CFG, token)


@pytest.mark.parametrize('override', [
    {'JWT_SECRET': 'a-different-signing-key-0123456789abcdef'},
    {'JWT_ISSUER': 'SomeoneElse'},
    {'JWT_AUDIENCE': 'SomeOtherClient'},
])
def test_token_from_other_issuer_audience_or_key_is_rejected(override):
    other = Settings(**{**CFG.model_dump(), **override})
    token = create_access_token(other, subject='a@b.com', user_id='u-1', role=Role.FARMER)
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(CFG, token)


def test_expired_token_is_rejected():
    expired = Settings(**{**CFG.model_dump(), 'JWT_EXPIRE_HOURS': -1})
    token = create_access_token(expired, subject='a@b.com', user_id='u-1', role=Role.FARMER)
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(CFG, token)


def test_password_hash_verifies_only_the_original_password():
    h = hash_password('Password123!')
    assert h != 'Password123!'
    assert verify_password('Password123!', h)
    assert not verify_password('password123!', h)
    assert not verify_password('', h)
