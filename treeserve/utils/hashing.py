"""bcrypt password hashing."""

import bcrypt

# bcrypt only looks at the first 72 bytes; newer releases reject longer input.
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> bytes:
    """Hash ``password`` with a fresh salt at bcrypt's default cost."""
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt())


def verify_password(password: str, hashed: bytes) -> bool:
    """Constant-time check of ``password`` against a bcrypt hash."""
    try:
        return bcrypt.checkpw(_encode(password), hashed)
    except ValueError:
        return False
