"""Tests for id card, phone and date normalisation."""

import pytest
from datetime import date

from app.core.formatting import (
    strip_separators,
    normalize_id_card,
    normalize_phone,
    format_id_card,
    format_phone,
    parse_appointment_date,
)
from common.api_error import ValidationFailureError


class TestIdCard:
    def test_normalize_strips_hyphens_and_spaces(self):
        assert normalize_id_card("1-2345-67890-12-3") == "1234567890123"
        assert normalize_id_card(" 1 2345 67890 12 3 ") == "1234567890123"

    def test_display_form(self):
        assert format_id_card("1234567890123") == "1-2345-67890-12-3"

    def test_display_leaves_unexpected_shapes_alone(self):
        assert format_id_card("12345") == "12345"

    @pytest.mark.parametrize("value", ["123456789012", "12345678901234", "12345678901ab", ""])
    def test_rejects_wrong_length_or_letters(self, value):
        with pytest.raises(ValidationFailureError):
            normalize_id_card(value)


class TestStripSeparators:
    def test_removes_spaces_and_hyphens_only(self):
        assert strip_separators(" 1-2345 67890-12-3 ") == "1234567890123"

    def test_does_not_validate(self):
        assert strip_separators("ab-c") == "abc"
        assert strip_separators("") == ""


class TestPhone:
    def test_normalize(self):
        assert normalize_phone("081-234-5678") == "0812345678"

    def test_display_form(self):
        assert format_phone("0812345678") == "081-234-5678"

    def test_rejects_short_number(self):
        with pytest.raises(ValidationFailureError):
            normalize_phone("081-234-567")


class TestAppointmentDate:
    def test_iso(self):
        assert parse_appointment_date("2025-07-01") == date(2025, 7, 1)

    def test_iso_with_time(self):
        assert parse_appointment_date("2025-07-01T00:00:00.000Z") == date(2025, 7, 1)

    @pytest.mark.parametrize("value", ["03/04/2025", "03-04-2025", "3.4.2025"])
    def test_day_first(self, value):
        assert parse_appointment_date(value) == date(2025, 4, 3)

    def test_date_passthrough(self):
        assert parse_appointment_date(date(2025, 1, 2)) == date(2025, 1, 2)

    @pytest.mark.parametrize("value", ["31/02/2025", "2025-13-01", "tomorrow", "", None])
    def test_rejects_invalid(self, value):
        with pytest.raises(ValidationFailureError):
            parse_appointment_date(value)
