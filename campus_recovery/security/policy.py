"""
Minimum-strength policy for login secrets.
"""
import re
from typing import List

from campus_recovery.errors import WeakSecret

MIN_LENGTH = 8
SPECIAL_CHARACTERS = "@$!%*?&"

_ALLOWED = re.compile(r'^[A-Za-z\d@$!%*?&]*$')


def validate_secret(secret: str) -> List[str]:
    """Return every policy violation of `secret`; an empty list means it is acceptable."""
    secret = secret or ""
    errors = []
    if len(secret) < MIN_LENGTH:
        errors.append(f"Password must be at least {MIN_LENGTH} characters long")
    if not re.search(r'[a-z]', secret):
        errors.append("Password must contain at least one lowercase letter")
    if not re.search(r'[A-Z]', secret):
        errors.append("Password must contain at least one uppercase letter")
    if not re.search(r'\d', secret):
        errors.append("Password must contain at least one number")
    if not any(char in SPECIAL_CHARACTERS for char in secret):
        errors.append(f"Password must contain at least one special character ({SPECIAL_CHARACTERS})")
    if not _ALLOWED.match(secret):
        errors.append(f"Password may only contain letters, numbers and {SPECIAL_CHARACTERS}")
    return errors


def check_secret(secret: str):
    """Raise WeakSecret when `secret` violates the policy."""
    errors = validate_secret(secret)
    if errors:
        raise WeakSecret(errors)
