from __future__ import annotations

from datetime import date

from app.api.installments.schemas import InstallmentListItem, InstallmentPlanResponse
from app.api.payments.helpers import money, to_installment_item, to_payment_response
from app.api.payments.models import InstallmentPlan, Payment


def to_plan_response(
    payment: Payment, installments: list[InstallmentPlan]
) -> InstallmentPlanResponse:
    return InstallmentPlanResponse(
        payment=to_payment_response(payment),
        installments=[to_installment_item(item) for item in installments],
    )


def to_installment_list_item(
    item: InstallmentPlan, payment: Payment, today: date
) -> InstallmentListItem:
    return InstallmentListItem(
        id=item.id,
        paymentId=item.payment_id,
        patientId=payment.patient_id,
        installmentNumber=item.installment_number,
        amount=money(item.amount),
        dueDate=item.due_date,
        isPaid=item.is_paid,
        paidDate=item.paid_date,
        isOverdue=not item.is_paid and item.due_date < today,
    )
