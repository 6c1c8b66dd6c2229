# app/db/models/health_data_table.py
from __future__ import annotations
from datetime import datetime
from typing import TYPE_CHECKING
from sqlalchemy import Integer, Float, DateTime, ForeignKey
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel, utc_now

if TYPE_CHECKING:
    from .patient_table import Patient


class HealthData(DbBaseModel):
    """Derived metrics; at most one current row per patient."""

    __tablename__ = "health_data"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patient.id"),
        nullable=False,
        unique=True,
    )

    bmi: Mapped[float] = mapped_column(Float, nullable=False)
    waist_to_height_ratio: Mapped[float] = mapped_column(Float, nullable=False)

    record_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    patient: Mapped["Patient"] = relationship("Patient", back_populates="health_data")


__all__ = ["HealthData"]
