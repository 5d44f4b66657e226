"""
Local input validation performed before any external command is issued.
"""

from __future__ import annotations

MIN_PASSWORD_LENGTH = 8


class PasswordValidationError(ValueError):
    """Raised when a WiFi password cannot be submitted as entered."""


def validate_password(password: str | None) -> str:
    """
    Return the password unchanged if it can be handed to the network manager.

    WPA passphrases are at least eight characters; anything shorter is
    rejected locally so no connection attempt is made.
    """
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise PasswordValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )
    return password
