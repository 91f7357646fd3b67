"""
Password hashing, identifier and nonce utilities.
"""

import hashlib
import logging
import secrets

from passlib.context import CryptContext

from staly.config import settings

logger = logging.getLogger(__name__)


# Password hashing context
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

NONCE_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVXYZabcdefghijklmnopqrstuvwxyz-._"
PUBLIC_ID_LABEL = "CHK-"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash. Unrecognized hashes never match."""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        logger.warning("Stored password hash could not be identified")
        return False


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    return pwd_context.hash(password)


def generate_user_id(prefix: str) -> str:
    """
    Create an opaque user id.

    Args:
        prefix: "u_" for email accounts, "a_" for Apple accounts

    Returns:
        prefix followed by 12 lowercase hex characters
    """
    return f"{prefix}{secrets.token_hex(6)}"


def sha256_hex(value: str) -> str:
    """Lowercase hex SHA-256 of a UTF-8 string."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def random_nonce(length: int = 32) -> str:
    """Random sign-in nonce drawn from NONCE_CHARSET."""
    if length <= 0:
        raise ValueError("Nonce length must be positive")
    return "".join(secrets.choice(NONCE_CHARSET) for _ in range(length))


def public_user_id(user_id: str) -> str:
    """
    Derive the short display identifier for a user.

    Cosmetic only: the first 4 bytes of SHA-256(user_id) as uppercase hex.
    """
    digest = hashlib.sha256(user_id.encode("utf-8")).digest()
    return PUBLIC_ID_LABEL + digest[:4].hex().upper()
