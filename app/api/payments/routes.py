from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.payments.helpers import (
    to_payment_detail_response,
    to_payment_response,
)
from app.api.payments.schemas import (
    PaymentCreateRequest,
    PaymentDetailResponse,
    PaymentResponse,
    PaymentsSummaryResponse,
    PaymentUpdateRequest,
)
from app.api.payments.services.payment_service import (
    cancel_payment_service,
    create_payment_service,
    delete_payment_service,
    get_payment_service,
    list_payments_service,
    payments_summary_service,
    update_payment_details_service,
)
from app.core.common.constants import PaymentStatus, Permissions
from app.core.request_context import get_idempotency_key, require_permission
from app.db.main import get_session
from app.utils.response import ApiResponse, MetaData, pagination_meta, success_response

payments_router = APIRouter()


@payments_router.post(
    "/",
    response_model=PaymentDetailResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_WRITE))],
)
async def create_payment(
    request: Request,
    payload: PaymentCreateRequest,
    session: AsyncSession = Depends(get_session),
):
    payment, installments = await create_payment_service(
        payload,
        session,
        idempotency_key=get_idempotency_key(request),
    )
    return to_payment_detail_response(payment, installments)


@payments_router.get(
    "/",
    response_model=ApiResponse[list[PaymentResponse]],
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_READ))],
)
async def list_payments(
    payment_status: PaymentStatus | None = Query(default=None, alias="status"),
    patient_id: uuid.UUID | None = Query(default=None, alias="patientId"),
    appointment_id: uuid.UUID | None = Query(default=None, alias="appointmentId"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, ge=1, le=100, alias="pageSize"),
    session: AsyncSession = Depends(get_session),
):
    payments, total = await list_payments_service(
        session,
        status=payment_status,
        patient_id=patient_id,
        appointment_id=appointment_id,
        page=page,
        page_size=page_size,
    )
    filters = {
        "status": payment_status.value if payment_status else None,
        "patientId": str(patient_id) if patient_id else None,
        "appointmentId": str(appointment_id) if appointment_id else None,
    }
    return success_response(
        data=[to_payment_response(payment) for payment in payments],
        meta=MetaData(
            pagination=pagination_meta(page, page_size, total),
            filters={key: value for key, value in filters.items() if value},
        ),
    )


@payments_router.get(
    "/summary",
    response_model=PaymentsSummaryResponse,
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_READ))],
)
async def payments_summary(session: AsyncSession = Depends(get_session)):
    return await payments_summary_service(session)


@payments_router.get(
    "/{payment_id}",
    response_model=PaymentDetailResponse,
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_READ))],
)
async def get_payment(
    payment_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    payment, installments = await get_payment_service(payment_id, session)
    return to_payment_detail_response(payment, installments)


@payments_router.patch(
    "/{payment_id}",
    response_model=PaymentResponse,
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_WRITE))],
)
async def update_payment_details(
    payment_id: uuid.UUID,
    payload: PaymentUpdateRequest,
    session: AsyncSession = Depends(get_session),
):
    payment = await update_payment_details_service(payment_id, payload, session)
    return to_payment_response(payment)


@payments_router.post(
    "/{payment_id}/cancel",
    response_model=PaymentResponse,
    response_model_by_alias=True,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_CANCEL))],
)
async def cancel_payment(
    payment_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    payment = await cancel_payment_service(payment_id, session)
    return to_payment_response(payment)


@payments_router.delete(
    "/{payment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission(Permissions.PAYMENTS_DELETE))],
)
async def delete_payment(
    payment_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
):
    await delete_payment_service(payment_id, session)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
