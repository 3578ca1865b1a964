"""
Password Policy Utilities
Provides password validation rules.
"""

import re
from typing import List, Optional

from creditdesk.config import settings


COMMON_PASSWORDS = {
    "password",
    "password123",
    "12345678",
    "123456789",
    "admin123",
    "qwerty123",
    "senha123",
    "changeme",
}


def validate_password(password: str, min_length: Optional[int] = None) -> List[str]:
    """
    Validate password strength and return a list of errors.
    An empty list means the password is acceptable.
    """
    min_length = min_length if min_length is not None else settings.password_min_length

    if not password:
        return ["Password is required"]

    errors: List[str] = []

    if len(password) < min_length:
        errors.append(f"Password must be at least {min_length} characters long")

    if not re.search(r"[A-Za-z]", password):
        errors.append("Password must include a letter")

    if not re.search(r"\d", password):
        errors.append("Password must include a number")

    if password.lower() in COMMON_PASSWORDS:
        errors.append("Password is too common")

    return errors
