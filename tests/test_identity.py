import pytest
from jose import jwt

from core.exceptions import Unauthorized
from core.security import Identity, JWTIdentityResolver, create_access_token, decode_access_token


def test_resolves_user_id_from_subject():
    token = create_access_token({"sub": "42"})

    assert JWTIdentityResolver().resolve(token) == Identity(user_id=42)


def test_token_carries_expiry_and_jti():
    payload = decode_access_token(create_access_token({"sub": "7"}))

    assert payload["sub"] == "7"
    assert "exp" in payload
    assert "jti" in payload


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token_is_unauthorized(token):
    with pytest.raises(Unauthorized, match="Not authenticated"):
        JWTIdentityResolver().resolve(token)


def test_garbage_token_is_unauthorized():
    with pytest.raises(Unauthorized):
        JWTIdentityResolver().resolve("not-a-jwt")


def test_token_signed_with_other_key_is_unauthorized():
    token = jwt.encode({"sub": "1"}, "some-other-secret-key-that-is-long-enough", algorithm="HS256")

    with pytest.raises(Unauthorized):
        JWTIdentityResolver().resolve(token)


def test_expired_token_is_unauthorized():
    token = create_access_token({"sub": "1"}, expires_minutes=-5)

    with pytest.raises(Unauthorized):
        JWTIdentityResolver().resolve(token)


@pytest.mark.parametrize(
    "claims",
    [{}, {"sub": "abc"}, {"sub": "0"}, {"sub": "1_0"}, {"sub": "99999999999999999999999"}],
)
def test_token_without_numeric_subject_is_unauthorized(claims):
    token = create_access_token(claims)

    with pytest.raises(Unauthorized):
        JWTIdentityResolver().resolve(token)
