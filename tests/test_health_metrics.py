"""Tests for BMI and waist-to-height ratio."""

import pytest

from app.services.v1.health_metrics import (
    calculate_bmi,
    calculate_waist_to_height_ratio,
    compute_health_metrics,
)
from common.api_error import ValidationFailureError


class TestHealthMetrics:
    def test_bmi_rounds_to_two_decimals(self):
        assert calculate_bmi(70, 175) == 22.86

    def test_waist_to_height_ratio(self):
        assert calculate_waist_to_height_ratio(80, 175) == 0.46

    def test_compute_both(self):
        metrics = compute_health_metrics(weight=70, height=175, waist=80)
        assert metrics.bmi == 22.86
        assert metrics.waist_to_height_ratio == 0.46

    @pytest.mark.parametrize(
        "weight, height",
        [(0, 175), (70, 0), (-1, 175), (70, -160)],
    )
    def test_bmi_rejects_non_positive(self, weight, height):
        with pytest.raises(ValidationFailureError):
            calculate_bmi(weight, height)

    def test_ratio_rejects_zero_height(self):
        """Zero height would otherwise divide by zero."""
        with pytest.raises(ValidationFailureError) as exc_info:
            calculate_waist_to_height_ratio(80, 0)
        assert exc_info.value.status_code == 422
