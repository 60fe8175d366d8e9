import secrets
import string

from jose import JWTError, jwt
from pwdlib import PasswordHash
from pwdlib.exceptions import UnknownHashError
from pwdlib.hashers.argon2 import Argon2Hasher

from app.config import settings
from app.core.exceptions import UnauthorizedException

TEMP_PASSWORD_ALPHABET = string.ascii_letters + string.digits + "!@#$%^&*"

_password_hash = PasswordHash((Argon2Hasher(),))


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using shared SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub' (user_id), 'exp', role and tenant claims

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    # Validate expiration (jose checks this automatically)
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    return payload


def generate_secret(length: int | None = None) -> str:
    """Generate a random one-time password from letters, digits and symbols."""
    length = length or settings.TEMP_PASSWORD_LENGTH
    return "".join(secrets.choice(TEMP_PASSWORD_ALPHABET) for _ in range(length))


def hash_secret(secret: str) -> str:
    """Hash ``secret`` with argon2."""
    if not secret:
        raise ValueError("Secret must not be empty")
    return _password_hash.hash(secret)


def verify_secret(secret: str, hashed: str) -> bool:
    """Return ``True`` if ``secret`` matches ``hashed``."""
    try:
        return _password_hash.verify(secret, hashed)
    except UnknownHashError:
        return False
