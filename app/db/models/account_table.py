# app/db/models/account_table.py
from __future__ import annotations
from typing import TYPE_CHECKING
from sqlalchemy import String, Integer
from sqlalchemy.orm import relationship, Mapped, mapped_column
from .db_base_model import DbBaseModel

if TYPE_CHECKING:
    from .appointment_table import Appointment


class Account(DbBaseModel):
    """
    Login credentials. Correlated with Patient by id_card only;
    there is deliberately no foreign key between the two.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # digits only, normalized before every write and lookup
    id_card: Mapped[str] = mapped_column(
        String(13),
        nullable=False,
        unique=True,
        index=True,
    )

    password: Mapped[str] = mapped_column(String(255), nullable=False)

    appointments: Mapped[list["Appointment"]] = relationship(
        "Appointment", back_populates="account"
    )


__all__ = ["Account"]
