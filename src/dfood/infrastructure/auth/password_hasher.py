"""Password hashing utility using Argon2.

Provides one-way hashing and constant-time verification of passwords
using the Argon2id algorithm.
"""

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_hasher = PasswordHasher()

# Verified against when a login names an unknown email, so that a missing
# user costs the same Argon2 work as a wrong password.
DUMMY_PASSWORD_HASH = _hasher.hash("dfood-dummy-password")


def hash_password(password: str) -> str:
    """Hash a password using Argon2id.

    Args:
        password: The plaintext password to hash.

    Returns:
        The hashed password string.

    Example:
        >>> hash_password("pw123456").startswith("$argon2id$")
        True
    """
    return _hasher.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    """Verify a password against a hash.

    Args:
        password: The plaintext password to verify.
        hashed: The hashed password to verify against.

    Returns:
        True if the password matches, False otherwise (including for a
        corrupt or non-Argon2 hash).
    """
    try:
        return _hasher.verify(hashed, password)
    except (VerificationError, InvalidHashError):
        return False
