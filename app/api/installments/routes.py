from __future__ import annotations

from datetime import date
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.installments.helpers import to_installment_list_item, to_plan_response
from app.api.installments.schemas import (
    CreateInstallmentPlanRequest,
    InstallmentListItem,
    InstallmentPaymentResponse,
    InstallmentPlanResponse,
    InstallmentStatusFilter,
    PatientInstallmentsSummary,
    SchedulePreviewRequest,
    SchedulePreviewResponse,
)
from app.api.installments.service import (
    create_installment_plan,
    generate_schedule,
    list_installments,
    patient_installments_summary,
    record_installment_payment,
)
from app.api.payments.helpers import money, to_installment_item, to_payment_response
from app.core.common.constants import Permissions
from app.core.request_context import require_permission
from app.db.main import get_session
from app.utils.response import ApiResponse, MetaData, success_response

installments_router = APIRouter()


@installments_router.post(
    "/preview",
    response_model=SchedulePreviewResponse,
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_READ))],
)
async def preview_schedule(payload: SchedulePreviewRequest):
    schedule = generate_schedule(
        payload.total_amount,
        payload.installment_count,
        payload.first_due_date,
        first_installment_prepaid=payload.first_installment_prepaid,
    )
    return SchedulePreviewResponse(
        totalAmount=money(payload.total_amount),
        installments=schedule,
    )


@installments_router.post(
    "/plans",
    response_model=InstallmentPlanResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_WRITE))],
)
async def create_plan(
    payload: CreateInstallmentPlanRequest,
    session: AsyncSession = Depends(get_session),
):
    payment, installments = await create_installment_plan(
        db=session,
        patient_id=payload.patient_id,
        appointment_id=payload.appointment_id,
        total_amount=payload.total_amount,
        installment_count=payload.installment_count,
        first_due_date=payload.first_due_date,
        notes=payload.notes,
    )
    return to_plan_response(payment, installments)


@installments_router.get(
    "/",
    response_model=ApiResponse[list[InstallmentListItem]],
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_READ))],
)
async def get_installments(
    installment_status: InstallmentStatusFilter = Query(default="all", alias="status"),
    payment_id: uuid.UUID | None = Query(default=None, alias="paymentId"),
    patient_id: uuid.UUID | None = Query(default=None, alias="patientId"),
    session: AsyncSession = Depends(get_session),
):
    today = date.today()
    rows = await list_installments(
        session,
        status=installment_status,
        payment_id=payment_id,
        patient_id=patient_id,
        today=today,
    )
    return success_response(
        data=[to_installment_list_item(item, payment, today) for item, payment in rows],
        meta=MetaData(filters={"status": installment_status}),
    )


@installments_router.get(
    "/patients/{patient_id}/summary",
    response_model=PatientInstallmentsSummary,
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_READ))],
)
async def get_patient_summary(
    patient_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    return await patient_installments_summary(session, patient_id)


@installments_router.post(
    "/{installment_id}/pay",
    response_model=InstallmentPaymentResponse,
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.INSTALLMENTS_COLLECT))],
)
async def pay_installment(
    installment_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    installment, payment = await record_installment_payment(session, installment_id)
    return InstallmentPaymentResponse(
        installment=to_installment_item(installment),
        payment=to_payment_response(payment),
    )
