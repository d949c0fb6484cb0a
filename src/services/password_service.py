"""Password hashing with bcrypt."""

import bcrypt

from domain.model.errors import HashingError

# Using 12 rounds (2^12 = 4096 iterations) for secure password hashing
BCRYPT_ROUNDS = 12

# bcrypt only reads the first 72 bytes; newer releases reject longer input
# instead of truncating, so truncate explicitly for both hash and verify.
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    """Hash password using bcrypt.

    Args:
        password: Plain text password
        rounds: bcrypt cost factor

    Returns:
        Bcrypt hashed password as string

    Raises:
        HashingError: the bcrypt backend failed
    """
    try:
        salt = bcrypt.gensalt(rounds=rounds)
        return bcrypt.hashpw(_encode(password), salt).decode("utf-8")
    except (ValueError, TypeError) as e:
        raise HashingError("Failed to hash password") from e


def verify_password(plain: str, hashed: str) -> bool:
    """Check a password against a bcrypt hash in constant time.

    Returns False for a wrong password. Raises HashingError only when
    ``hashed`` is not a usable bcrypt hash.
    """
    if not hashed:
        raise HashingError("Missing password hash")
    try:
        return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
    except (ValueError, TypeError) as e:
        raise HashingError("Malformed password hash") from e
