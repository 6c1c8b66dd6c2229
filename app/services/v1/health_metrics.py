# app/services/v1/health_metrics.py
from typing import NamedTuple
from common.api_error import ValidationFailureError


class HealthMetrics(NamedTuple):
    bmi: float
    waist_to_height_ratio: float


def _require_positive(name: str, value: float) -> float:
    if value is None or value <= 0:
        raise ValidationFailureError(f"{name} must be greater than 0")
    return value


def calculate_bmi(weight: float, height: float) -> float:
    """Weight (kg) over height (cm -> m) squared, 2 decimals."""
    _require_positive("weight", weight)
    _require_positive("height", height)
    height_m = height / 100
    return round(weight / (height_m * height_m), 2)


def calculate_waist_to_height_ratio(waist: float, height: float) -> float:
    _require_positive("waist", waist)
    _require_positive("height", height)
    return round(waist / height, 2)


def compute_health_metrics(weight: float, height: float, waist: float) -> HealthMetrics:
    return HealthMetrics(
        bmi=calculate_bmi(weight, height),
        waist_to_height_ratio=calculate_waist_to_height_ratio(waist, height),
    )


__all__ = [
    "HealthMetrics",
    "calculate_bmi",
    "calculate_waist_to_height_ratio",
    "compute_health_metrics",
]
