from enum import Enum

MAX_INSTALLMENT_COUNT = 120


class Roles:
    ADMIN = "admin"
    DOCTOR = "doctor"
    RECEPTIONIST = "receptionist"
    NURSE = "nurse"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CLIQ = "cliq"
    INSTALLMENT = "installment"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    CANCELLED = "cancelled"


class Permissions:
    PAYMENTS_READ = "payments:read"
    PAYMENTS_WRITE = "payments:write"
    PAYMENTS_CANCEL = "payments:cancel"
    PAYMENTS_DELETE = "payments:delete"
    INSTALLMENTS_COLLECT = "installments:collect"


ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    Roles.ADMIN: frozenset(
        {
            Permissions.PAYMENTS_READ,
            Permissions.PAYMENTS_WRITE,
            Permissions.PAYMENTS_CANCEL,
            Permissions.PAYMENTS_DELETE,
            Permissions.INSTALLMENTS_COLLECT,
        }
    ),
    Roles.RECEPTIONIST: frozenset(
        {
            Permissions.PAYMENTS_READ,
            Permissions.PAYMENTS_WRITE,
            Permissions.PAYMENTS_CANCEL,
            Permissions.INSTALLMENTS_COLLECT,
        }
    ),
    Roles.DOCTOR: frozenset({Permissions.PAYMENTS_READ}),
    Roles.NURSE: frozenset(),
}
