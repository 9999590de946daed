from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.payments.schemas import InstallmentItem, PaymentResponse

InstallmentStatusFilter = Literal["all", "paid", "unpaid", "overdue"]


class ScheduledInstallment(BaseModel):
    installment_number: Annotated[int, Field(alias="installmentNumber")]
    amount: Decimal
    due_date: Annotated[date, Field(alias="dueDate")]
    is_paid: Annotated[bool, Field(alias="isPaid")] = False
    paid_date: Annotated[date | None, Field(alias="paidDate")] = None

    model_config = {"populate_by_name": True}


class SchedulePreviewRequest(BaseModel):
    total_amount: Annotated[Decimal, Field(alias="totalAmount")]
    installment_count: Annotated[int, Field(alias="installmentCount")] = 3
    first_due_date: Annotated[date, Field(alias="firstDueDate")]
    first_installment_prepaid: Annotated[bool, Field(alias="firstInstallmentPrepaid")] = False

    model_config = {"populate_by_name": True}


class SchedulePreviewResponse(BaseModel):
    total_amount: Annotated[Decimal, Field(alias="totalAmount")]
    installments: list[ScheduledInstallment]

    model_config = {"populate_by_name": True}


class CreateInstallmentPlanRequest(BaseModel):
    patient_id: Annotated[UUID, Field(alias="patientId")]
    appointment_id: Annotated[UUID, Field(alias="appointmentId")]
    total_amount: Annotated[Decimal, Field(alias="totalAmount")]
    installment_count: Annotated[int, Field(alias="installmentCount")] = 3
    first_due_date: Annotated[date, Field(alias="firstDueDate")]
    notes: str | None = None

    model_config = {"populate_by_name": True}


class InstallmentPlanResponse(BaseModel):
    payment: PaymentResponse
    installments: list[InstallmentItem]

    model_config = {"populate_by_name": True}


class InstallmentListItem(InstallmentItem):
    patient_id: Annotated[UUID, Field(alias="patientId")]
    is_overdue: Annotated[bool, Field(alias="isOverdue")]


class InstallmentPaymentResponse(BaseModel):
    installment: InstallmentItem
    payment: PaymentResponse

    model_config = {"populate_by_name": True}


class PatientInstallmentsSummary(BaseModel):
    patient_id: Annotated[UUID, Field(alias="patientId")]
    total_installments: Annotated[int, Field(alias="totalInstallments")]
    paid_installments: Annotated[int, Field(alias="paidInstallments")]
    pending_installments: Annotated[int, Field(alias="pendingInstallments")]
    overdue_installments: Annotated[int, Field(alias="overdueInstallments")]
    total_amount: Annotated[Decimal, Field(alias="totalAmount")]
    paid_amount: Annotated[Decimal, Field(alias="paidAmount")]
    pending_amount: Annotated[Decimal, Field(alias="pendingAmount")]
    overdue_amount: Annotated[Decimal, Field(alias="overdueAmount")]
    next_due_date: Annotated[date | None, Field(alias="nextDueDate")] = None
    next_due_amount: Annotated[Decimal | None, Field(alias="nextDueAmount")] = None

    model_config = {"populate_by_name": True}
