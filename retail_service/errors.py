# retail_service/errors.py
"""
Error kinds raised by the order aggregate, the payment model and storage
"""
from typing import Any, Dict, Optional


class RetailError(Exception):
    """
    Base class for all retail service errors

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable error identifier
        status_code: HTTP status code used by the API layer
        details: Extra context for the caller
    """

    error_code = "RETAIL_ERROR"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class InvalidQuantity(RetailError):
    """A quantity change would leave zero or fewer units"""

    error_code = "INVALID_QUANTITY"
    status_code = 400

    def __init__(self, message: str, quantity: Optional[int] = None):
        super().__init__(message, {"quantity": quantity} if quantity is not None else None)
        self.quantity = quantity


class InvalidStateTransition(RetailError):
    """The requested transition is not allowed from the current status"""

    error_code = "INVALID_STATE_TRANSITION"
    status_code = 409

    def __init__(self, message: str, current_status: Any):
        status_value = getattr(current_status, "value", current_status)
        super().__init__(message, {"current_status": status_value})
        self.current_status = current_status


class InvalidRefundAmount(RetailError):
    """A refund amount exceeds the amount it is bounded by"""

    error_code = "INVALID_REFUND_AMOUNT"
    status_code = 400

    def __init__(self, message: str, amount: Any, limit: Any):
        super().__init__(message, {"amount": str(amount), "limit": str(limit)})
        self.amount = amount
        self.limit = limit


class NotFound(RetailError):
    """An addressed record does not exist"""

    error_code = "NOT_FOUND"
    status_code = 404


class PersistenceFailure(RetailError):
    """Storage could not complete the operation; nothing was written"""

    error_code = "PERSISTENCE_FAILURE"
    status_code = 503
