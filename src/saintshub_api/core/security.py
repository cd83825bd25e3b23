"""Password hashing and JWT access tokens.

Uses passlib with bcrypt for password hashing and PyJWT for token
signing/verification.  Tokens carry only the identity id as ``sub``;
privilege flags are always read from the database, never from the token.
"""

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt."""
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored bcrypt hash."""
    return pwd_context.verify(plain_password, hashed_password)


def password_needs_rehash(hashed_password: str) -> bool:
    """Whether a stored hash uses outdated parameters and should be replaced."""
    return pwd_context.needs_update(hashed_password)


def create_access_token(
    subject: uuid.UUID | str,
    secret_key: str,
    algorithm: str = "HS256",
    expires_minutes: int = 60 * 24,
) -> str:
    """Create a signed JWT access token.

    Args:
        subject: The identity id the token is issued for.
        secret_key: Secret key for signing.
        algorithm: JWT signing algorithm.
        expires_minutes: Lifetime of the token in minutes.

    Returns:
        The encoded JWT string.
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(subject),
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)


def decode_token(
    token: str,
    secret_key: str,
    algorithm: str = "HS256",
) -> dict:
    """Decode and validate a JWT token.

    Args:
        token: The JWT string to decode.
        secret_key: Secret key used for signing.
        algorithm: JWT signing algorithm.

    Returns:
        The decoded token payload.

    Raises:
        jwt.ExpiredSignatureError: If the token has expired.
        jwt.InvalidTokenError: If the token is malformed, the signature is wrong,
            a required claim is missing, or it is not an access token.
    """
    payload = jwt.decode(token, secret_key, algorithms=[algorithm], options={"require": ["exp", "sub"]})
    if payload.get("type") != ACCESS_TOKEN_TYPE:
        msg = "Not an access token"
        raise jwt.InvalidTokenError(msg)
    return payload
