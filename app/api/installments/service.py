from __future__ import annotations

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
import uuid

from dateutil.relativedelta import relativedelta
from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, select

from app.api.installments.schemas import (
    InstallmentStatusFilter,
    PatientInstallmentsSummary,
    ScheduledInstallment,
)
from app.api.payments.helpers import (
    CENT,
    checked_amount,
    get_installments_for_payment,
    get_payment,
    money,
)
from app.api.payments.models import InstallmentPlan, Payment
from app.core.common.constants import MAX_INSTALLMENT_COUNT, PaymentMethod, PaymentStatus
from app.core.exceptions import (
    ConflictError,
    InstallmentAlreadyPaid,
    InstallmentNotFound,
    ValidationException,
)
from app.core.messages import ErrorMessage
from app.core.middlewares import logger
from app.utils.event_publisher import publish_installment_paid_event, publish_payment_settled_event


def generate_schedule(
    total_amount: Decimal,
    installment_count: int,
    first_due_date: date,
    first_installment_prepaid: bool = False,
    today: date | None = None,
) -> list[ScheduledInstallment]:
    """Split ``total_amount`` into ``installment_count`` monthly installments.

    Every installment but the last gets the base share rounded to cents; the
    last one takes whatever is left so the schedule sums exactly to the
    total. Due dates step by calendar months from ``first_due_date``, with
    short months clamped to their last day.
    """
    if not 1 <= installment_count <= MAX_INSTALLMENT_COUNT:
        raise ValidationException(ErrorMessage.INSTALLMENT_COUNT_INVALID)
    total = checked_amount(total_amount)

    try:
        due_dates = [
            first_due_date + relativedelta(months=offset) for offset in range(installment_count)
        ]
    except (ValueError, OverflowError):
        raise ValidationException(ErrorMessage.DUE_DATE_OUT_OF_RANGE)

    base_share = total / Decimal(installment_count)
    share = base_share.quantize(CENT, rounding=ROUND_HALF_UP)
    last_amount = total - share * (installment_count - 1)
    if last_amount < 0:
        raise ValidationException(
            f"Amount {total} is too small to split into {installment_count} installments"
        )

    paid_on = today or date.today()
    schedule: list[ScheduledInstallment] = []
    for number, due_date in enumerate(due_dates, start=1):
        prepaid = first_installment_prepaid and number == 1
        schedule.append(
            ScheduledInstallment(
                installmentNumber=number,
                amount=last_amount if number == installment_count else share,
                dueDate=due_date,
                isPaid=prepaid,
                paidDate=paid_on if prepaid else None,
            )
        )
    return schedule


def build_installment_rows(
    payment_id: uuid.UUID, schedule: list[ScheduledInstallment]
) -> list[InstallmentPlan]:
    return [
        InstallmentPlan(
            payment_id=payment_id,
            installment_number=item.installment_number,
            amount=item.amount,
            due_date=item.due_date,
            is_paid=item.is_paid,
            paid_date=item.paid_date,
        )
        for item in schedule
    ]


async def create_installment_plan(
    db: AsyncSession,
    patient_id: uuid.UUID,
    appointment_id: uuid.UUID,
    total_amount: Decimal,
    installment_count: int,
    first_due_date: date,
    notes: str | None = None,
) -> tuple[Payment, list[InstallmentPlan]]:
    schedule = generate_schedule(total_amount, installment_count, first_due_date)

    payment = Payment(
        appointment_id=appointment_id,
        patient_id=patient_id,
        amount=money(total_amount),
        paid_amount=Decimal("0.00"),
        payment_method=PaymentMethod.INSTALLMENT.value,
        status=PaymentStatus.PENDING.value,
        payment_date=first_due_date,
        notes=notes or None,
    )
    installments = build_installment_rows(payment.id, schedule)

    # payment and its schedule land together or not at all
    db.add(payment)
    try:
        await db.flush()
        db.add_all(installments)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        raise

    await db.refresh(payment)
    logger.info(
        f"Installment plan created payment={payment.id} "
        f"amount={payment.amount} installments={installment_count}"
    )
    return payment, await get_installments_for_payment(db, payment.id)


async def record_installment_payment(
    db: AsyncSession,
    installment_id: uuid.UUID,
    today: date | None = None,
) -> tuple[InstallmentPlan, Payment]:
    """Mark an installment paid and reconcile its payment in one transaction.

    The owning payment row is locked first so sibling installments paid
    concurrently are applied one after another, and the paid flag only
    flips through a conditional update so a repeated call is rejected
    instead of being counted twice.
    """
    today = today or date.today()

    stmt = select(InstallmentPlan).where(InstallmentPlan.id == installment_id)
    installment = (await db.execute(stmt)).scalar_one_or_none()
    if not installment:
        raise InstallmentNotFound()

    payment = await get_payment(db, installment.payment_id, for_update=True)
    if payment.status == PaymentStatus.CANCELLED.value:
        await db.rollback()
        raise ConflictError(ErrorMessage.PAYMENT_CANCELLED)

    result = await db.execute(
        update(InstallmentPlan)
        .where(
            InstallmentPlan.id == installment_id,
            InstallmentPlan.is_paid.is_(False),
        )
        .values(is_paid=True, paid_date=today)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise InstallmentAlreadyPaid()

    paid_sum_stmt = select(func.sum(InstallmentPlan.amount)).where(
        InstallmentPlan.payment_id == payment.id,
        InstallmentPlan.is_paid.is_(True),
    )
    total_paid = money((await db.execute(paid_sum_stmt)).scalar())
    amount = money(payment.amount)
    if total_paid > amount:
        await db.rollback()
        raise ConflictError(ErrorMessage.INSTALLMENTS_EXCEED_TOTAL)

    # once anything is paid the payment never drops back to pending
    payment.paid_amount = total_paid
    payment.status = (
        PaymentStatus.PAID.value if total_paid >= amount else PaymentStatus.PARTIAL.value
    )
    db.add(payment)
    await db.commit()

    await db.refresh(installment)
    await db.refresh(payment)
    logger.info(
        f"Installment paid installment={installment.id} no={installment.installment_number} "
        f"payment={payment.id} paid_amount={payment.paid_amount} status={payment.status}"
    )

    try:
        await publish_installment_paid_event(
            {
                "event_type": "INSTALLMENT_PAID",
                "payment_id": str(payment.id),
                "patient_id": str(payment.patient_id),
                "installment_id": str(installment.id),
                "installment_number": installment.installment_number,
                "amount": str(money(installment.amount)),
                "paid_amount": str(money(payment.paid_amount)),
                "status": payment.status,
            }
        )
        if payment.status == PaymentStatus.PAID.value:
            await publish_payment_settled_event(
                {
                    "event_type": "PAYMENT_SETTLED",
                    "payment_id": str(payment.id),
                    "patient_id": str(payment.patient_id),
                    "amount": str(money(payment.amount)),
                }
            )
    except Exception as exc:
        logger.error(f"Event publishing failed for installment={installment.id}: {exc}")

    return installment, payment


async def list_installments(
    db: AsyncSession,
    status: InstallmentStatusFilter = "all",
    payment_id: uuid.UUID | None = None,
    patient_id: uuid.UUID | None = None,
    today: date | None = None,
) -> list[tuple[InstallmentPlan, Payment]]:
    today = today or date.today()
    stmt = select(InstallmentPlan, Payment).join(
        Payment, Payment.id == InstallmentPlan.payment_id
    )

    if status == "paid":
        stmt = stmt.where(InstallmentPlan.is_paid.is_(True))
    elif status == "unpaid":
        stmt = stmt.where(InstallmentPlan.is_paid.is_(False))
    elif status == "overdue":
        stmt = stmt.where(
            InstallmentPlan.is_paid.is_(False),
            InstallmentPlan.due_date < today,
        )

    if payment_id:
        stmt = stmt.where(InstallmentPlan.payment_id == payment_id)
    if patient_id:
        stmt = stmt.where(Payment.patient_id == patient_id)

    stmt = stmt.order_by(InstallmentPlan.due_date, InstallmentPlan.installment_number)
    result = await db.execute(stmt)
    return [(row[0], row[1]) for row in result.all()]


async def patient_installments_summary(
    db: AsyncSession,
    patient_id: uuid.UUID,
    today: date | None = None,
) -> PatientInstallmentsSummary:
    today = today or date.today()
    rows = await list_installments(db, patient_id=patient_id, today=today)
    installments = [
        item for item, payment in rows if payment.status != PaymentStatus.CANCELLED.value
    ]

    paid = [item for item in installments if item.is_paid]
    pending = [item for item in installments if not item.is_paid]
    overdue = [item for item in pending if item.due_date < today]
    next_due = pending[0] if pending else None

    return PatientInstallmentsSummary(
        patientId=patient_id,
        totalInstallments=len(installments),
        paidInstallments=len(paid),
        pendingInstallments=len(pending),
        overdueInstallments=len(overdue),
        totalAmount=sum((money(item.amount) for item in installments), Decimal("0.00")),
        paidAmount=sum((money(item.amount) for item in paid), Decimal("0.00")),
        pendingAmount=sum((money(item.amount) for item in pending), Decimal("0.00")),
        overdueAmount=sum((money(item.amount) for item in overdue), Decimal("0.00")),
        nextDueDate=next_due.due_date if next_due else None,
        nextDueAmount=money(next_due.amount) if next_due else None,
    )
