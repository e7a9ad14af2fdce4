import pytest

from shopbridge.core.exceptions import ValidationError
from shopbridge.utils.validators import MAX_ID, ValidationUtils


class TestParsePositiveInt:
    @pytest.mark.parametrize(
        "value, expected",
        [(1, 1), (10, 10), ("3", 3), (" 8 ", 8), (MAX_ID, MAX_ID), ("9223372036854775807", MAX_ID)],
    )
    def test_accepted(self, value, expected):
        assert ValidationUtils.parse_positive_int(value, "bad") == expected

    @pytest.mark.parametrize(
        "value",
        [
            0, -5, "0", "-1", "1.5", 2.0, True, None, "", [], "abc", "²", "١٢",
            MAX_ID + 1, "99999999999999999999999",
        ],
    )
    def test_rejected_with_given_message(self, value):
        with pytest.raises(ValidationError) as exc_info:
            ValidationUtils.parse_positive_int(value, "Se requiere qty (mayor a 0)")

        assert exc_info.value.message == "Se requiere qty (mayor a 0)"


class TestValidateEmail:
    def test_returns_address_as_supplied(self):
        assert ValidationUtils.validate_email("Ana.Perez@Gmail.COM") == "Ana.Perez@Gmail.COM"

    def test_strips_surrounding_spaces(self):
        assert ValidationUtils.validate_email("  ana@gmail.com ") == "ana@gmail.com"

    @pytest.mark.parametrize("email", ["plainaddress", "@gmail.com", "ana@", "ana@@gmail.com"])
    def test_invalid(self, email):
        with pytest.raises(ValidationError) as exc_info:
            ValidationUtils.validate_email(email)

        assert exc_info.value.message == f"Email inválido: {email}"


class TestCleanOptional:
    @pytest.mark.parametrize("value, expected", [(None, None), ("", None), ("  ", None), (" 123 ", "123")])
    def test_clean_optional(self, value, expected):
        assert ValidationUtils.clean_optional(value) == expected
