class ErrorCode:
    INTERNAL_SERVER_ERROR = "internal_server_error"
    DATABASE_ERROR = "database_error"
    ACCESS_TOKEN_REQUIRED = "access_token_required"
    ACCESS_DENIED = "access_denied"

    NOT_FOUND = "not_found"
    VALIDATION_ERROR = "validation_error"
    CONFLICT = "conflict"

    PAYMENT_NOT_FOUND = "payment_not_found"
    INSTALLMENT_NOT_FOUND = "installment_not_found"
    INSTALLMENT_ALREADY_PAID = "installment_already_paid"
