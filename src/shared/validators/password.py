"""Password validation functions."""

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 64


def validate_password_policy(password: str) -> str:
    """Validate password requirements.

    Requirements:
    - Between 8 and 64 characters
    - Not made only of whitespace

    Args:
        password: Password string to validate

    Returns:
        The validated password string

    Raises:
        ValueError: If password doesn't meet the requirements

    Examples:
        >>> validate_password_policy("password123")
        'password123'
        >>> validate_password_policy("short")
        Traceback (most recent call last):
        ...
        ValueError: min password length is 8

    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(f"min password length is {PASSWORD_MIN_LENGTH}")
    if len(password) > PASSWORD_MAX_LENGTH:
        raise ValueError(f"max password length is {PASSWORD_MAX_LENGTH}")
    if not password.strip():
        raise ValueError("Password must not be blank")
    return password
