# app/db/models/appointment_table.py
from __future__ import annotations
from datetime import date
from typing import TYPE_CHECKING, Any, Optional
from sqlalchemy import String, Date, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .account_table import Account


class Appointment(DbBaseModel):
    """
    An evaluation result, a scheduled appointment, or both.

    Evaluation-only rows have no appointment_date; appointment-only rows
    have no result_program.
    """

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    program_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # None is stored as SQL NULL, not the JSON literal null
    result_program: Mapped[Optional[Any]] = mapped_column(
        JSON(none_as_null=True), nullable=True
    )

    appointment_date: Mapped[Optional[date]] = mapped_column(
        Date, nullable=True, index=True
    )

    account: Mapped["Account"] = relationship("Account", back_populates="appointments")


__all__ = ["Appointment"]
