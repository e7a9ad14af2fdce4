from typing import Any, Optional

from email_validator import EmailNotValidError, validate_email

from shopbridge.core.exceptions import ValidationError

# Identifiers are BIGINT columns
MAX_ID = 2 ** 63 - 1


class ValidationUtils:
    """Input validation shared by services and the tool layer"""

    @classmethod
    def validate_email(cls, email: str) -> str:
        """
        Check e-mail syntax and return the address as supplied, stripped.

        The stored address is the lookup key and is matched exactly, so it
        is never rewritten. Deliverability (DNS) is not checked so that
        lookups never block on the network.
        """
        email = email.strip()
        try:
            validate_email(email, check_deliverability=False)
        except EmailNotValidError:
            raise ValidationError(f"Email inválido: {email}")
        return email

    @classmethod
    def is_decimal_token(cls, value: str) -> bool:
        """ASCII digits only; str.isdigit() also accepts superscripts and other scripts"""
        return value.isascii() and value.isdecimal()

    @classmethod
    def parse_positive_int(cls, value: Any, message: str) -> int:
        """
        Accept ints and all-digit strings in 1..MAX_ID.

        bool is rejected even though it subclasses int.
        """
        if isinstance(value, bool):
            raise ValidationError(message)
        if isinstance(value, int):
            result = value
        elif isinstance(value, str) and cls.is_decimal_token(value.strip()):
            result = int(value.strip())
        else:
            raise ValidationError(message)

        if result <= 0 or result > MAX_ID:
            raise ValidationError(message)
        return result

    @classmethod
    def clean_optional(cls, value: Optional[str]) -> Optional[str]:
        """Strip a string; empty or whitespace-only becomes None"""
        if value is None:
            return None
        cleaned = str(value).strip()
        return cleaned or None
