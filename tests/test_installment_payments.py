from datetime import date
from decimal import Decimal
import uuid

import pytest

from app.api.installments.service import (
    create_installment_plan,
    list_installments,
    patient_installments_summary,
    record_installment_payment,
)
from app.api.payments.helpers import get_installments_for_payment, get_payment
from app.api.payments.services.payment_service import cancel_payment_service
from app.core.exceptions import ConflictError, InstallmentAlreadyPaid, InstallmentNotFound

PAID_ON = date(2024, 2, 1)


async def _plan(session, total="300.00", count=2, first_due=date(2024, 1, 15), patient_id=None):
    return await create_installment_plan(
        session,
        patient_id=patient_id or uuid.uuid4(),
        appointment_id=uuid.uuid4(),
        total_amount=Decimal(total),
        installment_count=count,
        first_due_date=first_due,
    )


async def test_plan_creation_persists_pending_payment_with_unpaid_rows(session):
    payment, installments = await _plan(session, total="100.00", count=3)

    assert payment.payment_method == "installment"
    assert payment.status == "pending"
    assert payment.paid_amount == Decimal("0.00")
    assert payment.payment_date == date(2024, 1, 15)
    assert [item.installment_number for item in installments] == [1, 2, 3]
    assert [item.amount for item in installments] == [
        Decimal("33.33"),
        Decimal("33.33"),
        Decimal("33.34"),
    ]
    assert not any(item.is_paid for item in installments)


async def test_paying_installments_moves_payment_from_partial_to_paid(session):
    payment, installments = await _plan(session)

    first, payment = await record_installment_payment(session, installments[0].id, today=PAID_ON)
    assert first.is_paid is True
    assert first.paid_date == PAID_ON
    assert payment.paid_amount == Decimal("150.00")
    assert payment.status == "partial"

    second, payment = await record_installment_payment(session, installments[1].id, today=PAID_ON)
    assert second.is_paid is True
    assert payment.paid_amount == Decimal("300.00")
    assert payment.status == "paid"


async def test_paying_out_of_order_still_reconciles(session):
    payment, installments = await _plan(session, total="100.00", count=3)

    _, payment = await record_installment_payment(session, installments[2].id, today=PAID_ON)

    assert payment.paid_amount == Decimal("33.34")
    assert payment.status == "partial"


async def test_repaying_an_installment_is_rejected_without_double_counting(session):
    payment, installments = await _plan(session)
    await record_installment_payment(session, installments[0].id, today=PAID_ON)

    with pytest.raises(InstallmentAlreadyPaid):
        await record_installment_payment(session, installments[0].id, today=PAID_ON)

    await session.refresh(payment)
    assert payment.paid_amount == Decimal("150.00")
    assert payment.status == "partial"


async def test_unknown_installment_is_not_found(session):
    with pytest.raises(InstallmentNotFound):
        await record_installment_payment(session, uuid.uuid4())


async def test_installment_of_cancelled_payment_cannot_be_paid(session):
    payment, installments = await _plan(session)
    payment_id, first_id = payment.id, installments[0].id
    await cancel_payment_service(payment_id, session)

    with pytest.raises(ConflictError):
        await record_installment_payment(session, first_id, today=PAID_ON)

    rows = await get_installments_for_payment(session, payment_id)
    assert not any(item.is_paid for item in rows)


async def test_list_installments_filters_by_state(session):
    today = date(2024, 3, 1)
    payment, installments = await _plan(session, total="300.00", count=3, first_due=date(2024, 1, 10))
    await record_installment_payment(session, installments[0].id, today=today)

    paid = await list_installments(session, status="paid", today=today)
    unpaid = await list_installments(session, status="unpaid", today=today)
    overdue = await list_installments(session, status="overdue", today=today)
    everything = await list_installments(session, payment_id=payment.id, today=today)

    assert [item.installment_number for item, _ in paid] == [1]
    assert [item.installment_number for item, _ in unpaid] == [2, 3]
    # #2 was due 2024-02-10, #3 is due 2024-03-10
    assert [item.installment_number for item, _ in overdue] == [2]
    assert [item.due_date for item, _ in everything] == [
        date(2024, 1, 10),
        date(2024, 2, 10),
        date(2024, 3, 10),
    ]


async def test_list_installments_filters_by_patient(session):
    patient_id = uuid.uuid4()
    await _plan(session, patient_id=patient_id)
    await _plan(session)

    rows = await list_installments(session, patient_id=patient_id)

    assert len(rows) == 2
    assert all(payment.patient_id == patient_id for _, payment in rows)


async def test_patient_summary_counts_paid_pending_and_overdue(session):
    patient_id = uuid.uuid4()
    today = date(2024, 3, 1)
    _, installments = await _plan(
        session, total="300.00", count=3, first_due=date(2024, 1, 10), patient_id=patient_id
    )
    await record_installment_payment(session, installments[0].id, today=today)

    summary = await patient_installments_summary(session, patient_id, today=today)

    assert summary.total_installments == 3
    assert summary.paid_installments == 1
    assert summary.pending_installments == 2
    assert summary.overdue_installments == 1
    assert summary.total_amount == Decimal("300.00")
    assert summary.paid_amount == Decimal("100.00")
    assert summary.pending_amount == Decimal("200.00")
    assert summary.overdue_amount == Decimal("100.00")
    assert summary.next_due_date == date(2024, 2, 10)
    assert summary.next_due_amount == Decimal("100.00")


async def test_sibling_installments_paid_from_separate_sessions(session_factory):
    async with session_factory() as setup:
        payment, installments = await _plan(setup, total="300.00", count=3)
        payment_id = payment.id
        first_id, second_id = installments[0].id, installments[1].id

    async with session_factory() as front_desk, session_factory() as back_office:
        # back office holds the payment as it looked before the front desk collected
        stale = await get_payment(back_office, payment_id)
        assert stale.paid_amount == Decimal("0.00")

        _, after_first = await record_installment_payment(front_desk, first_id, today=PAID_ON)
        _, after_second = await record_installment_payment(back_office, second_id, today=PAID_ON)

    assert after_first.paid_amount == Decimal("100.00")
    assert after_second.paid_amount == Decimal("200.00")
    assert after_second.status == "partial"

    async with session_factory() as check:
        reloaded = await get_payment(check, payment_id)
        rows = await get_installments_for_payment(check, payment_id)

    assert reloaded.paid_amount == Decimal("200.00")
    assert [item.is_paid for item in rows] == [True, True, False]


async def test_cancelling_twice_keeps_the_payment_cancelled(session):
    payment, _ = await _plan(session)

    await cancel_payment_service(payment.id, session)
    again = await cancel_payment_service(payment.id, session)

    assert again.status == "cancelled"
