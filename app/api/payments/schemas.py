from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.common.constants import PaymentMethod, PaymentStatus


class PaymentCreateRequest(BaseModel):
    appointment_id: Annotated[UUID, Field(alias="appointmentId")]
    patient_id: Annotated[UUID, Field(alias="patientId")]
    amount: Decimal
    paid_amount: Annotated[Decimal | None, Field(alias="paidAmount")] = None
    payment_method: Annotated[PaymentMethod, Field(alias="paymentMethod")] = PaymentMethod.CASH
    payment_date: Annotated[date | None, Field(alias="paymentDate")] = None
    notes: str | None = None
    installment_count: Annotated[int | None, Field(alias="installmentCount")] = None
    first_due_date: Annotated[date | None, Field(alias="firstDueDate")] = None

    model_config = {"populate_by_name": True}


class PaymentUpdateRequest(BaseModel):
    payment_method: Annotated[PaymentMethod | None, Field(alias="paymentMethod")] = None
    notes: str | None = None

    model_config = {"populate_by_name": True}


class InstallmentItem(BaseModel):
    id: UUID
    payment_id: Annotated[UUID, Field(alias="paymentId")]
    installment_number: Annotated[int, Field(alias="installmentNumber")]
    amount: Decimal
    due_date: Annotated[date, Field(alias="dueDate")]
    is_paid: Annotated[bool, Field(alias="isPaid")]
    paid_date: Annotated[date | None, Field(alias="paidDate")] = None

    model_config = {"populate_by_name": True, "from_attributes": True}


class PaymentResponse(BaseModel):
    id: UUID
    appointment_id: Annotated[UUID, Field(alias="appointmentId")]
    patient_id: Annotated[UUID, Field(alias="patientId")]
    amount: Decimal
    paid_amount: Annotated[Decimal, Field(alias="paidAmount")]
    outstanding_amount: Annotated[Decimal, Field(alias="outstandingAmount")]
    payment_method: Annotated[PaymentMethod, Field(alias="paymentMethod")]
    status: PaymentStatus
    payment_date: Annotated[date | None, Field(alias="paymentDate")] = None
    notes: str | None = None
    created_at: Annotated[datetime | None, Field(alias="createdAt")] = None
    updated_at: Annotated[datetime | None, Field(alias="updatedAt")] = None

    model_config = {"populate_by_name": True}


class PaymentDetailResponse(PaymentResponse):
    installments: list[InstallmentItem] = []


class PaymentsSummaryResponse(BaseModel):
    total_revenue: Annotated[Decimal, Field(alias="totalRevenue")]
    pending_amount: Annotated[Decimal, Field(alias="pendingAmount")]
    currency: str
    count_by_status: Annotated[dict[str, int], Field(alias="countByStatus")]

    model_config = {"populate_by_name": True}
