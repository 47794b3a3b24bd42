"""
Password rules for local accounts.

Example:
    from common.utils import validate_password

    is_valid, errors = validate_password("short")
    if not is_valid:
        raise BadRequestException(errors[0], code="WEAK_PASSWORD")
"""

from typing import List, Tuple

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128


def validate_password(
    password: str,
    min_length: int = MIN_PASSWORD_LENGTH,
    max_length: int = MAX_PASSWORD_LENGTH,
) -> Tuple[bool, List[str]]:
    """
    Check a new password against the length rules.

    Returns:
        (is_valid, errors); errors is empty when valid
    """
    errors: List[str] = []

    if len(password or "") < min_length:
        errors.append(f"Password must be at least {min_length} characters")
    elif len(password) > max_length:
        errors.append(f"Password must be no more than {max_length} characters")

    return not errors, errors
