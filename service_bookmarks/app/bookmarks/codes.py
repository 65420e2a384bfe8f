"""
Short code generation for bookmarks.
"""

import secrets
import string

CODE_CHARSET = string.ascii_letters + string.digits
DEFAULT_CODE_LENGTH = 9


class CodeGenerator:
    """Random alphanumeric codes from a cryptographically secure source."""

    def __init__(self, charset: str = CODE_CHARSET):
        self.charset = charset

    def generate(self, length: int = DEFAULT_CODE_LENGTH) -> str:
        if length < 1:
            raise ValueError("code length must be positive")
        return "".join(secrets.choice(self.charset) for _ in range(length))
