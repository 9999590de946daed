class ErrorMessage:
    # ---------- Auth / Access ----------
    SERVER_ERROR = "Internal server error"
    DATABASE_FAILURE = "Database operation failed"
    AUTH_CONTEXT_MISSING = "Authentication context missing"
    USER_NOT_AUTHENTICATED = "User is not authenticated"
    USER_ID_MISSING = "Authenticated user id missing"
    ACCESS_DENIED = "Access denied"
    PERMISSION_REQUIRED = "You do not have permission to perform this action"

    # ---------- Payments ----------
    PAYMENT_NOT_FOUND = "Payment not found"
    PAYMENT_CANCELLED = "Payment is cancelled"
    PAYMENT_ALREADY_PAID = "Payment is already fully paid"
    PAYMENT_AMOUNT_INVALID = "Amount must be greater than zero"
    AMOUNT_OUT_OF_RANGE = "Amount must be a number no greater than 9999999999.99"
    PAID_AMOUNT_INVALID = "Paid amount must be greater than zero"
    PAID_AMOUNT_EXCEEDS_TOTAL = "Paid amount cannot exceed the payment amount"
    PAYMENT_METHOD_LOCKED = "Payment method cannot change while an installment plan exists"

    # ---------- Installments ----------
    INSTALLMENT_NOT_FOUND = "Installment not found"
    INSTALLMENT_ALREADY_PAID = "Installment already paid"
    INSTALLMENT_COUNT_INVALID = "Installment count must be between 1 and 120"
    INSTALLMENT_COUNT_REQUIRED = "installmentCount is required for installment payments"
    INSTALLMENTS_EXCEED_TOTAL = "Paid installments exceed the payment amount"
    DUE_DATE_OUT_OF_RANGE = "Installment due dates fall outside the supported calendar"
