# app/db/schemas/appointment_schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import date
from typing import Any, Optional
from app.core.formatting import parse_appointment_date


class AppointmentBase(BaseModel):
    user_id: int = Field(..., gt=0, description="Account id")
    program_name: str = Field(..., min_length=1, max_length=200)


class EvaluationCreate(AppointmentBase):
    result_program: Any = Field(..., description="Scored evaluation payload")

    @field_validator("result_program")
    @classmethod
    def _result_required(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("result_program is required")
        return v


class AppointmentCreate(AppointmentBase):
    appointment_date: date = Field(
        ..., description="YYYY-MM-DD or DD/MM/YYYY", examples=["2025-07-01"]
    )

    @field_validator("appointment_date", mode="before")
    @classmethod
    def _parse_date(cls, v: Any) -> date:
        return parse_appointment_date(v)


class AppointmentWithResultCreate(AppointmentCreate):
    result_program: Optional[Any] = None


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    program_name: str
    result_program: Optional[Any] = None
    appointment_date: Optional[date] = None


class AppointmentOverviewResponse(AppointmentResponse):
    """Appointment with the owning patient, for staff listings."""

    patient_id: int
    title_name: str
    first_name: str
    last_name: str
    id_card: str
    phone: str


class AppointmentDetailResponse(AppointmentOverviewResponse):
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


class AppointmentCreatedResponse(BaseModel):
    id: int
