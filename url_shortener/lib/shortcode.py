"""Short code generation utilities."""

import secrets
import string
from typing import Optional


class ShortCodeGenerator:
    """Generate random short codes for URLs.

    Codes are not unique by construction; uniqueness is enforced by the
    repository on insert and callers retry with a fresh code on collision.
    """

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_uppercase + string.ascii_lowercase + string.digits

    def __init__(self, default_length: int = 6):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
        """
        if default_length < 1:
            raise ValueError("default_length must be positive")
        self.default_length = default_length

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Characters are drawn uniformly with replacement from the CSPRNG.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code

        Raises:
            ValueError: If length is below 1
        """
        length = length if length is not None else self.default_length
        if length < 1:
            raise ValueError("length must be positive")
        return ''.join(secrets.choice(self.BASE62_CHARS) for _ in range(length))

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code has valid format (non-empty, base62 only).

        Args:
            code: Code to validate

        Returns:
            True if valid format
        """
        return bool(code) and all(c in ShortCodeGenerator.BASE62_CHARS for c in code)
