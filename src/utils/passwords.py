"""Password hashing and verification.

New hashes use scrypt and are stored as ``hex(derived_key) + "." + hex(salt)``.
Hashes in bcrypt's modular format (``$2b$...``) are still accepted on
verification; earlier deployments seeded the admin account with one.
"""

import hashlib
import hmac
import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)

SALT_BYTES = 16
KEY_LENGTH = 64
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1

_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def _derive(password: str, salt: bytes) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt,
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    """Hash a password with a fresh random salt.

    Args:
        password: Plain text password.

    Returns:
        Stored form ``"<hex key>.<hex salt>"``.

    Raises:
        ValueError: If the password is empty.
    """
    if not password:
        raise ValueError("Password must not be empty")
    salt = secrets.token_bytes(SALT_BYTES)
    return f"{_derive(password, salt).hex()}.{salt.hex()}"


def _verify_bcrypt(password: str, stored: str) -> bool:
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(password_bytes, stored.encode("utf-8"))
    except ValueError:
        logger.warning("Malformed bcrypt hash encountered during verification")
        return False


def verify_password(password: str, stored: str) -> bool:
    """Check a plain text password against a stored hash.

    Args:
        password: Plain text password to verify.
        stored: Stored form produced by ``hash_password`` or a bcrypt hash.

    Returns:
        True if the password matches. Malformed stored values yield False.
    """
    if not password or not stored:
        return False

    if stored.startswith(_BCRYPT_PREFIXES):
        return _verify_bcrypt(password, stored)

    hashed_hex, sep, salt_hex = stored.partition(".")
    if not sep or not hashed_hex or not salt_hex:
        return False
    try:
        expected = bytes.fromhex(hashed_hex)
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        return False
    if len(expected) != KEY_LENGTH:
        return False

    return hmac.compare_digest(_derive(password, salt), expected)
