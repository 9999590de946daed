# app/core/exceptions.py
from app.core.errors import ErrorCode
from app.core.messages import ErrorMessage

class GlobalException(Exception):
    status_code: int
    error_code: str
    message: str

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


class ResourceNotFound(GlobalException):
    status_code = 404
    error_code = ErrorCode.NOT_FOUND
    message = "Requested resource not found"


class ValidationException(GlobalException):
    status_code = 400
    error_code = ErrorCode.VALIDATION_ERROR
    message = "Validation failed"


class ConflictError(GlobalException):
    status_code = 409
    error_code = ErrorCode.CONFLICT
    message = "Resource was modified concurrently"


class AccessDenied(GlobalException):
    status_code = 403
    error_code = ErrorCode.ACCESS_DENIED
    message = ErrorMessage.ACCESS_DENIED


class PaymentNotFound(ResourceNotFound):
    error_code = ErrorCode.PAYMENT_NOT_FOUND
    message = ErrorMessage.PAYMENT_NOT_FOUND


class InstallmentNotFound(ResourceNotFound):
    error_code = ErrorCode.INSTALLMENT_NOT_FOUND
    message = ErrorMessage.INSTALLMENT_NOT_FOUND


class InstallmentAlreadyPaid(ConflictError):
    error_code = ErrorCode.INSTALLMENT_ALREADY_PAID
    message = ErrorMessage.INSTALLMENT_ALREADY_PAID
