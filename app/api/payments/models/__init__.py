from app.api.payments.models.installment_plan import InstallmentPlan
from app.api.payments.models.payment import Payment


__all__ = [
    "InstallmentPlan",
    "Payment",
]
