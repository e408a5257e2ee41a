import jwt
import pytest

from impact_backend.auth.jwt_handler import create_access_token, decode_access_token


def test_access_token_round_trips_subject_and_role() -> None:
    payload = decode_access_token(create_access_token(subject='42', role='student'))

    assert payload['sub'] == '42'
    assert payload['role'] == 'student'
    assert payload['exp'] > payload['iat']


def test_expired_access_token_is_rejected() -> None:
    token = create_access_token(subject='42', role='admin', expires_minutes=-1)

    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)
