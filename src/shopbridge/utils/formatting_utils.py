import json
import re
import unicodedata
from decimal import Decimal
from typing import Any, Union


class FormattingUtils:
    """
    Formatting helpers shared by the REST and tool surfaces

    Features:
    - Conversation label normalization
    - Money formatting for tool output
    - JSON pretty printing for tool output
    """

    LABEL_ALLOWED = re.compile(r"[^a-z0-9_-]")
    WHITESPACE = re.compile(r"\s+")

    @classmethod
    def to_label(cls, value: str) -> str:
        """
        Normalize free text into a chat-platform label.

        Steps, in order: lowercase, strip diacritics, drop whitespace, keep
        only [a-z0-9_-].

        Examples:
            to_label("Camisa Básica") -> "camisabasica"
            to_label("Pantalón (Jean)") -> "pantalonjean"
        """
        if not value:
            return ""

        lowered = value.lower()
        decomposed = unicodedata.normalize("NFKD", lowered)
        stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
        compact = cls.WHITESPACE.sub("", stripped)
        return cls.LABEL_ALLOWED.sub("", compact)

    @classmethod
    def format_money(cls, amount: Union[Decimal, float, int]) -> str:
        """
        Format an amount for display

        Examples:
            format_money(35) -> "$35.00"
            format_money(Decimal("1299.5")) -> "$1,299.50"
        """
        return f"${Decimal(str(amount)):,.2f}"

    @classmethod
    def format_json_pretty(cls, data: Any, indent: int = 2) -> str:
        """Format data as pretty JSON string"""
        return json.dumps(data, indent=indent, ensure_ascii=False, default=str)
