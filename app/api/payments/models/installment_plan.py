from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, Numeric
from sqlalchemy.sql import func
from sqlmodel import Field, SQLModel


class InstallmentPlan(SQLModel, table=True):
    __tablename__ = "installment_plans"
    __table_args__ = (
        Index(
            "uq_installment_plan_payment_number",
            "payment_id",
            "installment_number",
            unique=True,
        ),
        Index("idx_installment_plan_due_date", "due_date"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, nullable=False)
    payment_id: uuid.UUID = Field(
        sa_column=Column(
            "payment_id",
            ForeignKey("payments.id", ondelete="CASCADE"),
            nullable=False,
        )
    )

    installment_number: int = Field(sa_column=Column(Integer, nullable=False))
    amount: Decimal = Field(sa_column=Column(Numeric(12, 2), nullable=False))
    due_date: date = Field(sa_column=Column(Date, nullable=False))

    is_paid: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, server_default="false"),
    )
    paid_date: date | None = Field(default=None, sa_column=Column(Date))

    created_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime, nullable=False, server_default=func.now()),
    )
