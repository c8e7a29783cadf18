"""
Password hashing helpers.

Passwords are stored as bcrypt hashes; plain text never reaches the database
or the audit trail.
"""

from __future__ import annotations

import bcrypt

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    """Hash a plain-text password with a fresh salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a plain-text password against a stored hash. A missing hash never matches."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False
