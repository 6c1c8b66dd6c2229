"""
Easily extendible template file for seed data templates
- Add new templates
- Compose them into DEFAULT_DATA_TEMPLATE

    Example: Seed only patients
        await seed_db(db_manager, hasher, {"patients": PATIENT_DATA_TEMPLATE}, records=100)

    Example: Seed patients with one evaluation and one appointment each
        await seed_db(db_manager, hasher, DEFAULT_DATA_TEMPLATE, records=50)
"""

from datetime import date
from typing import Any

# Individual templates
PATIENT_DATA_TEMPLATE: dict[str, Any] = {
    "title_name": "นาย",
    "first_name": "ทดสอบ",
    "last_name": "ระบบ",
    # 4 + 9 digits of index -> 13-digit id card
    "id_card_prefix": "1100",
    # 3 + 7 digits of index -> 10-digit phone
    "phone_prefix": "081",
    "date_birth": date(1960, 1, 1),
    "village": "หมู่ 1",
    "subdistrict": "ศรีภูมิ",
    "district": "อำเภอเมืองเชียงใหม่",
    "province": "เชียงใหม่",
    "weight": 55.0,
    "height": 155.0,
    "waist": 70.0,
    "password": "password123",
}

APPOINTMENT_DATA_TEMPLATE: dict[str, Any] = {
    "program_name": "ประเมินความเสี่ยงโรคเบาหวาน",
    "result_program": {"score": 0, "risk_level": "low"},
    "first_date": date(2025, 7, 1),
    "interval_days": 7,
}

# Combined default template
DEFAULT_DATA_TEMPLATE: dict[str, dict[str, Any]] = {
    "patients": PATIENT_DATA_TEMPLATE,
    "appointments": APPOINTMENT_DATA_TEMPLATE,
}

__all__ = [
    "DEFAULT_DATA_TEMPLATE",
    "PATIENT_DATA_TEMPLATE",
    "APPOINTMENT_DATA_TEMPLATE",
]
