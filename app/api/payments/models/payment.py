from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
import uuid

from sqlalchemy import Column, Date, DateTime, Index, Numeric, String, Text
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class Payment(SQLModel, table=True):
    __tablename__ = "payments"
    __table_args__ = (
        Index("idx_payment_patient_id", "patient_id"),
        Index("idx_payment_appointment_id", "appointment_id"),
        Index("idx_payment_status", "status"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    appointment_id: uuid.UUID = Field(nullable=False)
    patient_id: uuid.UUID = Field(nullable=False)

    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    paid_amount: Decimal = Field(
        default=Decimal("0.00"),
        sa_column=Column(Numeric(12, 2), nullable=False, server_default="0"),
    )

    payment_method: str = Field(sa_column=Column(String(20), nullable=False))
    status: str = Field(
        default="pending",
        sa_column=Column(String(20), nullable=False, server_default="pending"),
    )
    payment_date: date | None = Field(default=None, sa_column=Column(Date))
    notes: str | None = Field(default=None, sa_column=Column(Text))

    idempotency_key: str | None = Field(
        default=None,
        sa_column=Column("idempotency_key", String(100), unique=True),
    )

    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime, nullable=False, server_default=func.now()),
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(
            DateTime,
            nullable=False,
            server_default=func.now(),
            onupdate=func.now(),
        ),
    )
