"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    code = "domain_error"

    def __init__(self, message: str = "", **context):
        super().__init__(message or self.code)
        self.context = context


class ValidationError(DomainException):
    """User-correctable input problem (bad amount, bad fund choice)"""

    code = "validation_error"


class InvalidAmountError(ValidationError):
    """Amount must be strictly positive"""

    code = "invalid_amount"


class AmountOutOfRangeError(InvalidAmountError):
    """Amount larger than a stored money column holds"""

    code = "amount_out_of_range"


class InvalidPercentageError(ValidationError):
    """Allocation percentage outside 0..100"""

    code = "invalid_percentage"


class InvalidTransferError(ValidationError):
    """Transfer request is structurally invalid"""

    code = "invalid_transfer"


class SameFundError(InvalidTransferError):
    """Source and destination fund are the same"""

    code = "same_fund"


class InsufficientFundsError(DomainException):
    """Debit would drive a fund below zero"""

    code = "insufficient_funds"


class NotFoundError(DomainException):
    """Referenced entity does not exist or belongs to another user"""

    code = "not_found"


class PersistenceError(DomainException):
    """Store unreachable or constraint violation"""

    code = "persistence_error"


class NotificationDeliveryError(DomainException):
    """Push provider rejected or failed to accept a notification"""

    code = "notification_delivery_failed"
