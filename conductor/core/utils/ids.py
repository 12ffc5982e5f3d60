"""Random identifier generation."""

import secrets
import string

B62_ALPHABET = string.digits + string.ascii_letters


def generate_b62_id(length: int) -> str:
    """Return a random base62 identifier of ``length`` characters."""
    if length <= 0:
        raise ValueError("Identifier length must be positive")
    return "".join(secrets.choice(B62_ALPHABET) for _ in range(length))
