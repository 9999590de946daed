from __future__ import annotations

from datetime import date
from decimal import Decimal
import uuid

from dateutil.relativedelta import relativedelta
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from app.api.installments.service import build_installment_rows, generate_schedule
from app.api.payments.helpers import (
    checked_amount,
    derive_payment_status,
    get_installments_for_payment,
    get_payment,
    money,
)
from app.api.payments.models import InstallmentPlan, Payment
from app.api.payments.schemas import (
    PaymentCreateRequest,
    PaymentsSummaryResponse,
    PaymentUpdateRequest,
)
from app.core.common.constants import PaymentMethod, PaymentStatus
from app.core.config import Config
from app.core.exceptions import ConflictError, ValidationException
from app.core.messages import ErrorMessage
from app.core.middlewares import logger


async def create_payment_service(
    payload: PaymentCreateRequest,
    session: AsyncSession,
    idempotency_key: str | None = None,
    today: date | None = None,
) -> tuple[Payment, list[InstallmentPlan]]:
    if idempotency_key:
        stmt = select(Payment).where(Payment.idempotency_key == idempotency_key)
        existing_payment = (await session.execute(stmt)).scalars().first()
        if existing_payment:
            return existing_payment, await get_installments_for_payment(
                session, existing_payment.id
            )

    today = today or date.today()
    amount = checked_amount(payload.amount)
    payment_date = payload.payment_date or today

    schedule = []
    if payload.payment_method == PaymentMethod.INSTALLMENT:
        if payload.installment_count is None:
            raise ValidationException(ErrorMessage.INSTALLMENT_COUNT_REQUIRED)
        # the first installment is collected at the desk; the schedule starts a month out
        try:
            first_due_date = payload.first_due_date or payment_date + relativedelta(months=1)
        except (ValueError, OverflowError):
            raise ValidationException(ErrorMessage.DUE_DATE_OUT_OF_RANGE)
        schedule = generate_schedule(
            amount,
            payload.installment_count,
            first_due_date,
            first_installment_prepaid=True,
            today=today,
        )
        paid_amount = schedule[0].amount
    else:
        paid_amount = amount if payload.paid_amount is None else money(payload.paid_amount)
        if paid_amount <= 0:
            raise ValidationException(ErrorMessage.PAID_AMOUNT_INVALID)
        if paid_amount > amount:
            raise ValidationException(ErrorMessage.PAID_AMOUNT_EXCEEDS_TOTAL)

    payment = Payment(
        appointment_id=payload.appointment_id,
        patient_id=payload.patient_id,
        amount=amount,
        paid_amount=paid_amount,
        payment_method=payload.payment_method.value,
        status=derive_payment_status(paid_amount, amount).value,
        payment_date=payment_date,
        notes=payload.notes or None,
        idempotency_key=idempotency_key,
    )

    session.add(payment)
    try:
        await session.flush()
        if schedule:
            session.add_all(build_installment_rows(payment.id, schedule))
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        raise

    await session.refresh(payment)
    logger.info(
        f"Payment recorded payment={payment.id} method={payment.payment_method} "
        f"amount={payment.amount} paid={payment.paid_amount} status={payment.status}"
    )
    return payment, await get_installments_for_payment(session, payment.id)


async def get_payment_service(
    payment_id: uuid.UUID, session: AsyncSession
) -> tuple[Payment, list[InstallmentPlan]]:
    payment = await get_payment(session, payment_id)
    return payment, await get_installments_for_payment(session, payment.id)


async def list_payments_service(
    session: AsyncSession,
    status: PaymentStatus | None = None,
    patient_id: uuid.UUID | None = None,
    appointment_id: uuid.UUID | None = None,
    page: int = 1,
    page_size: int = 20,
) -> tuple[list[Payment], int]:
    filters = []
    if status:
        filters.append(Payment.status == status.value)
    if patient_id:
        filters.append(Payment.patient_id == patient_id)
    if appointment_id:
        filters.append(Payment.appointment_id == appointment_id)

    count_stmt = select(func.count()).select_from(Payment).where(*filters)
    total = (await session.execute(count_stmt)).scalar() or 0

    stmt = (
        select(Payment)
        .where(*filters)
        .order_by(Payment.created_at.desc(), Payment.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    payments = list((await session.execute(stmt)).scalars().all())
    return payments, total


async def update_payment_details_service(
    payment_id: uuid.UUID,
    payload: PaymentUpdateRequest,
    session: AsyncSession,
) -> Payment:
    payment = await get_payment(session, payment_id, for_update=True)

    fields = payload.model_fields_set
    if "payment_method" in fields and payload.payment_method is not None:
        new_method = payload.payment_method.value
        if new_method != payment.payment_method and PaymentMethod.INSTALLMENT.value in (
            new_method,
            payment.payment_method,
        ):
            await session.rollback()
            raise ValidationException(ErrorMessage.PAYMENT_METHOD_LOCKED)
        payment.payment_method = new_method
    if "notes" in fields:
        payment.notes = payload.notes or None

    session.add(payment)
    await session.commit()
    await session.refresh(payment)
    return payment


async def cancel_payment_service(payment_id: uuid.UUID, session: AsyncSession) -> Payment:
    payment = await get_payment(session, payment_id, for_update=True)
    if payment.status == PaymentStatus.CANCELLED.value:
        # already cancelled, only the row lock to release
        await session.commit()
        return payment
    if payment.status == PaymentStatus.PAID.value:
        await session.rollback()
        raise ConflictError(ErrorMessage.PAYMENT_ALREADY_PAID)

    payment.status = PaymentStatus.CANCELLED.value
    session.add(payment)
    await session.commit()
    await session.refresh(payment)
    logger.info(f"Payment cancelled payment={payment.id}")
    return payment


async def delete_payment_service(payment_id: uuid.UUID, session: AsyncSession) -> None:
    payment = await get_payment(session, payment_id, for_update=True)
    try:
        await session.execute(
            delete(InstallmentPlan).where(InstallmentPlan.payment_id == payment.id)
        )
        await session.delete(payment)
        await session.commit()
    except SQLAlchemyError:
        await session.rollback()
        raise
    logger.info(f"Payment deleted payment={payment_id}")


async def payments_summary_service(session: AsyncSession) -> PaymentsSummaryResponse:
    count_stmt = select(Payment.status, func.count()).group_by(Payment.status)
    counts = {status.value: 0 for status in PaymentStatus}
    for status, count in (await session.execute(count_stmt)).all():
        counts[status] = count

    amounts_stmt = select(Payment.amount, Payment.paid_amount).where(
        Payment.status != PaymentStatus.CANCELLED.value
    )
    total_revenue = Decimal("0.00")
    pending_amount = Decimal("0.00")
    for amount, paid_amount in (await session.execute(amounts_stmt)).all():
        total_revenue += money(paid_amount)
        pending_amount += max(money(amount) - money(paid_amount), Decimal("0.00"))

    return PaymentsSummaryResponse(
        totalRevenue=total_revenue,
        pendingAmount=pending_amount,
        currency=Config.CURRENCY,
        countByStatus=counts,
    )
