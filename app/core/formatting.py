# app/core/formatting.py
"""
Canonical and display forms of identity numbers, phone numbers and dates.

Identity and phone numbers are stored and compared as digits only;
the hyphenated forms are produced on read and nowhere else.
"""

import re
from datetime import date
from typing import Union
from common.api_error import ValidationFailureError

ID_CARD_LENGTH = 13
PHONE_LENGTH = 10

_SEPARATORS = re.compile(r"[\s\-]")
_ID_CARD_GROUPS = re.compile(r"^(\d{1})(\d{4})(\d{5})(\d{2})(\d{1})$")
_PHONE_GROUPS = re.compile(r"^(\d{3})(\d{3})(\d{4})$")
_DAY_MONTH_YEAR = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")


def strip_separators(value: str) -> str:
    """Drop spaces and hyphens; no length or digit check."""
    return _SEPARATORS.sub("", value)


def _normalize_digits(value: str, field: str, length: int) -> str:
    if not isinstance(value, str):
        raise ValidationFailureError(f"{field} must be a string")
    digits = strip_separators(value)
    if not digits.isdigit() or len(digits) != length:
        raise ValidationFailureError(f"{field} must contain exactly {length} digits")
    return digits


def normalize_id_card(value: str) -> str:
    """'1-2345-67890-12-3' -> '1234567890123'"""
    return _normalize_digits(value, "id_card", ID_CARD_LENGTH)


def normalize_phone(value: str) -> str:
    """'081-234-5678' -> '0812345678'"""
    return _normalize_digits(value, "phone", PHONE_LENGTH)


def format_id_card(id_card: str) -> str:
    """'1234567890123' -> '1-2345-67890-12-3'; other shapes pass through."""
    return _ID_CARD_GROUPS.sub(r"\1-\2-\3-\4-\5", id_card)


def format_phone(phone: str) -> str:
    """'0812345678' -> '081-234-5678'; other shapes pass through."""
    return _PHONE_GROUPS.sub(r"\1-\2-\3", phone)


def parse_appointment_date(value: Union[date, str]) -> date:
    """
    Accept a date, an ISO 'YYYY-MM-DD' string or a 'DD/MM/YYYY' literal.

    The two string forms are told apart by shape, never guessed:
    '03/04/2025' is always 3 April.
    """
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValidationFailureError("appointment_date is required")

    text = value.strip()
    try:
        match = _DAY_MONTH_YEAR.match(text)
        if match:
            day, month, year = (int(part) for part in match.groups())
            return date(year, month, day)
        # tolerate a time component on ISO input ("2025-01-31T00:00:00Z")
        if len(text) > 10 and text[10] in "T ":
            text = text[:10]
        return date.fromisoformat(text)
    except ValueError as e:
        raise ValidationFailureError(
            f"appointment_date must be YYYY-MM-DD or DD/MM/YYYY, got {value!r}"
        ) from e


__all__ = [
    "ID_CARD_LENGTH",
    "PHONE_LENGTH",
    "strip_separators",
    "normalize_id_card",
    "normalize_phone",
    "format_id_card",
    "format_phone",
    "parse_appointment_date",
]
