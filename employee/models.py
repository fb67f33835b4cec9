from __future__ import annotations
from datetime import datetime, timezone
from sqlalchemy import DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column
from core.database import Base

NAME_LENGTH = 100
EMAIL_LENGTH = 255
PHONE_LENGTH = 50
CREATED_BY_LENGTH = 64


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True)

    first_name: Mapped[str] = mapped_column(String(NAME_LENGTH), nullable=False)
    last_name:  Mapped[str] = mapped_column(String(NAME_LENGTH), nullable=False)

    # stored lower-cased; the unique index is the authoritative duplicate guard
    email: Mapped[str] = mapped_column(String(EMAIL_LENGTH), unique=True, index=True, nullable=False)
    phone_number: Mapped[str] = mapped_column(String(PHONE_LENGTH), nullable=False, default="")

    department: Mapped[str] = mapped_column(String(NAME_LENGTH), nullable=False, index=True)
    position:   Mapped[str] = mapped_column(String(NAME_LENGTH), nullable=False, index=True)
    salary:     Mapped[float] = mapped_column(Float, nullable=False, default=0)

    # "" or "/uploads/<file name>"
    profile_picture: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # principal that created the record, never changed afterwards
    created_by: Mapped[str | None] = mapped_column(String(CREATED_BY_LENGTH), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
