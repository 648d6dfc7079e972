"""Password hashing and token generation for the mailing backend."""

from __future__ import annotations

import re
import secrets

import bcrypt

from tabletop_prep.core.exceptions import ValidationError


_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def new_verification_token() -> str:
    """64 hex characters, as sent in verification links."""
    return secrets.token_hex(32)


def new_bearer_token() -> str:
    return secrets.token_urlsafe(32)


def normalize_email(email: str) -> str:
    """Trim, lower-case and validate an address.

    Raises:
        ValidationError: If the address is not plausibly valid.
    """
    normalized = (email or "").strip().lower()
    if len(normalized) > 254 or not _EMAIL_PATTERN.match(normalized):
        raise ValidationError("Invalid email address", field_name="email", invalid_value=email)
    return normalized


__all__ = [
    "hash_password",
    "new_bearer_token",
    "new_verification_token",
    "normalize_email",
    "verify_password",
]
