from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.api.payments.models import InstallmentPlan, Payment
from app.api.payments.schemas import InstallmentItem, PaymentDetailResponse, PaymentResponse
from app.core.common.constants import PaymentStatus
from app.core.exceptions import PaymentNotFound, ValidationException
from app.core.messages import ErrorMessage

CENT = Decimal("0.01")
# largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal("9999999999.99")


def money(value: Decimal | str | int | float | None) -> Decimal:
    if value is None:
        return Decimal("0.00")
    try:
        amount = Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationException(ErrorMessage.AMOUNT_OUT_OF_RANGE)
    if not amount.is_finite():
        raise ValidationException(ErrorMessage.AMOUNT_OUT_OF_RANGE)
    return amount


def checked_amount(value: Decimal | str | int | float) -> Decimal:
    amount = money(value)
    if amount <= 0:
        raise ValidationException(ErrorMessage.PAYMENT_AMOUNT_INVALID)
    if amount > MAX_AMOUNT:
        raise ValidationException(ErrorMessage.AMOUNT_OUT_OF_RANGE)
    return amount


def derive_payment_status(paid_amount: Decimal, amount: Decimal) -> PaymentStatus:
    if paid_amount >= amount:
        return PaymentStatus.PAID
    if paid_amount > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.PENDING


async def get_payment(
    db: AsyncSession, payment_id: uuid.UUID, for_update: bool = False
) -> Payment:
    stmt = select(Payment).where(Payment.id == payment_id)
    if for_update:
        # a locked read must not be answered from the identity map
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    payment = (await db.execute(stmt)).scalar_one_or_none()
    if not payment:
        raise PaymentNotFound()
    return payment


async def get_installments_for_payment(
    db: AsyncSession, payment_id: uuid.UUID
) -> list[InstallmentPlan]:
    stmt = (
        select(InstallmentPlan)
        .where(InstallmentPlan.payment_id == payment_id)
        .order_by(InstallmentPlan.installment_number)
    )
    return list((await db.execute(stmt)).scalars().all())


def to_installment_item(item: InstallmentPlan) -> InstallmentItem:
    return InstallmentItem(
        id=item.id,
        paymentId=item.payment_id,
        installmentNumber=item.installment_number,
        amount=money(item.amount),
        dueDate=item.due_date,
        isPaid=item.is_paid,
        paidDate=item.paid_date,
    )


def to_payment_response(payment: Payment) -> PaymentResponse:
    amount = money(payment.amount)
    paid_amount = money(payment.paid_amount)
    return PaymentResponse(
        id=payment.id,
        appointmentId=payment.appointment_id,
        patientId=payment.patient_id,
        amount=amount,
        paidAmount=paid_amount,
        outstandingAmount=max(amount - paid_amount, Decimal("0.00")),
        paymentMethod=payment.payment_method,
        status=payment.status,
        paymentDate=payment.payment_date,
        notes=payment.notes,
        createdAt=payment.created_at,
        updatedAt=payment.updated_at,
    )


def to_payment_detail_response(
    payment: Payment, installments: list[InstallmentPlan]
) -> PaymentDetailResponse:
    return PaymentDetailResponse(
        **to_payment_response(payment).model_dump(),
        installments=[to_installment_item(item) for item in installments],
    )
