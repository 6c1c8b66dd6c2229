# app/db/models/patient_table.py
from __future__ import annotations
from datetime import date
from typing import TYPE_CHECKING, Optional
from sqlalchemy import String, Date, Integer, Float
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .health_data_table import HealthData


class Patient(DbBaseModel):
    __tablename__ = "patient"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title_name: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    # Stored digits-only; punctuation is added on read
    id_card: Mapped[str] = mapped_column(String(13), nullable=False, index=True)
    phone: Mapped[str] = mapped_column(String(10), nullable=False)

    gender: Mapped[str] = mapped_column(String(20), nullable=False)
    date_birth: Mapped[date] = mapped_column(Date, nullable=False)

    # Address
    house_number: Mapped[Optional[str]] = mapped_column(String(50))
    street: Mapped[Optional[str]] = mapped_column(String(100))
    village: Mapped[Optional[str]] = mapped_column(String(100))
    subdistrict: Mapped[Optional[str]] = mapped_column(String(100))
    district: Mapped[Optional[str]] = mapped_column(String(100))
    province: Mapped[Optional[str]] = mapped_column(String(100))

    # Measurements: kg, cm, cm
    weight: Mapped[float] = mapped_column(Float, nullable=False)
    height: Mapped[float] = mapped_column(Float, nullable=False)
    waist: Mapped[float] = mapped_column(Float, nullable=False)

    # Legacy copy of users.password, kept for older readers of this table
    password: Mapped[Optional[str]] = mapped_column(String(255))

    health_data: Mapped[Optional["HealthData"]] = relationship(
        "HealthData", back_populates="patient", uselist=False
    )


__all__ = ["Patient"]
