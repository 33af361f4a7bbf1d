import secrets

DEFAULT_CODE_LENGTH = 6


def generate_code(length: int = DEFAULT_CODE_LENGTH) -> str:
    """Return a decimal one-time code of exactly `length` digits."""
    if length < 1:
        raise ValueError("Code length must be positive")
    return ''.join(str(secrets.randbelow(10)) for _ in range(length))
