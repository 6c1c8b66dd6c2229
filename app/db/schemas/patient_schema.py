# app/db/schemas/patient_schema.py
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator
from datetime import date, datetime, timedelta
from typing import Optional, List
from app.core.formatting import normalize_id_card, normalize_phone


class PatientBase(BaseModel):
    title_name: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    id_card: str = Field(..., description="13 digits, hyphens allowed")
    phone: str = Field(..., description="10 digits, hyphens allowed")
    gender: str = Field(..., min_length=1, max_length=20)
    date_birth: date

    house_number: Optional[str] = Field(None, max_length=50)
    street: Optional[str] = Field(None, max_length=100)
    village: Optional[str] = Field(None, max_length=100)
    subdistrict: Optional[str] = Field(None, max_length=100)
    district: Optional[str] = Field(None, max_length=100)
    province: Optional[str] = Field(None, max_length=100)

    @field_validator("id_card", mode="before")
    @classmethod
    def _normalize_id_card(cls, v: str) -> str:
        return normalize_id_card(v)

    @field_validator("phone", mode="before")
    @classmethod
    def _normalize_phone(cls, v: str) -> str:
        return normalize_phone(v)

    @field_validator("date_birth")
    @classmethod
    def _not_in_future(cls, v: date) -> date:
        if v > date.today():
            raise ValueError("date_birth cannot be in the future")
        return v


class HealthMeasurements(BaseModel):
    weight: float = Field(..., gt=0, le=500, description="kg")
    height: float = Field(..., gt=0, le=300, description="cm")
    waist: float = Field(..., gt=0, le=300, description="cm")


class PatientCreate(PatientBase, HealthMeasurements):
    password: str = Field(..., min_length=1, max_length=72)

    @classmethod
    def seed_records(
        cls,
        template: dict,
        records: int,
        start_index: int = 0,
        gender_cycle: tuple[str, ...] = ("male", "female"),
    ) -> List["PatientCreate"]:
        """Deterministic demo patients; id cards and phones derive from the index."""
        result = []
        base_date = template.get("date_birth", date(1970, 1, 1))
        for i in range(start_index, start_index + records):
            record = cls(
                title_name=template["title_name"],
                first_name=f"{template['first_name']}{i}",
                last_name=template["last_name"],
                id_card=f"{template['id_card_prefix']}{i:09d}",
                phone=f"{template['phone_prefix']}{i:07d}",
                gender=gender_cycle[i % len(gender_cycle)],
                date_birth=base_date + timedelta(days=i * 37),
                house_number=str(i + 1),
                village=template.get("village"),
                subdistrict=template.get("subdistrict"),
                district=template.get("district"),
                province=template.get("province"),
                weight=template["weight"] + (i % 20),
                height=template["height"] + (i % 15),
                waist=template["waist"] + (i % 10),
                password=template["password"],
            )
            result.append(record)
        return result


class PatientUpdate(PatientBase):
    """
    Full profile replacement. Measurements are all-or-none;
    password is rotated only when present.
    """

    weight: Optional[float] = Field(None, gt=0, le=500)
    height: Optional[float] = Field(None, gt=0, le=300)
    waist: Optional[float] = Field(None, gt=0, le=300)
    password: Optional[str] = Field(None, min_length=1, max_length=72)

    @model_validator(mode="after")
    def _measurements_all_or_none(self) -> "PatientUpdate":
        supplied = [v is not None for v in (self.weight, self.height, self.waist)]
        if any(supplied) and not all(supplied):
            raise ValueError("weight, height and waist must be supplied together")
        return self

    @property
    def measurements(self) -> Optional[HealthMeasurements]:
        if self.weight is None or self.height is None or self.waist is None:
            return None
        return HealthMeasurements(weight=self.weight, height=self.height, waist=self.waist)


class PasswordChangeRequest(BaseModel):
    password: str = Field(..., min_length=1, max_length=72)


class HealthMetricsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    patient_id: int
    bmi: float
    waist_to_height_ratio: float
    record_date: Optional[datetime] = None


class PatientProfileResponse(BaseModel):
    """Profile as shown to the patient; id_card and phone in display form."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title_name: str
    first_name: str
    last_name: str
    id_card: str
    phone: str
    gender: str
    date_birth: date
    house_number: Optional[str] = None
    street: Optional[str] = None
    village: Optional[str] = None
    subdistrict: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    weight: float
    height: float
    waist: float
    bmi: Optional[float] = None
    waist_to_height_ratio: Optional[float] = None


class PatientCreatedResponse(BaseModel):
    id: int
    message: str = "Patient and user created successfully"


class MessageResponse(BaseModel):
    message: str
