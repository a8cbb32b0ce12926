"""
Password hashing for account registration and login.

Hashes are produced and verified by passlib; the repositories only ever see
the hash string.
"""

import logging

from passlib.context import CryptContext

from app.core.errors import CredentialDecodeError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """
    Check a plain password against a stored hash.

    Returns:
        True if the password matches, False otherwise

    Raises:
        CredentialDecodeError: If the stored hash cannot be parsed
    """
    try:
        return pwd_context.verify(password, password_hash)
    except (ValueError, TypeError) as e:
        logger.error(f"Stored password hash could not be verified: {e}")
        raise CredentialDecodeError(e) from e
