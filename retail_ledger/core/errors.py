class LedgerError(Exception):
    """Base class for every failure an engine operation reports to its caller."""

    status_code = 400
    code = "ledger_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    status_code = 400
    code = "validation_error"


class StateConflictError(LedgerError):
    status_code = 409
    code = "state_conflict"


class NotFoundError(LedgerError):
    status_code = 404
    code = "not_found"

    def __init__(self, entity: str, entity_id=None):
        message = "{} not found".format(entity)
        if entity_id is not None:
            message = "{} #{} not found".format(entity, entity_id)
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class StoreError(LedgerError):
    status_code = 503
    code = "store_error"


class InvalidDiscount(ValidationError):
    code = "invalid_discount"


class InvalidDate(ValidationError):
    code = "invalid_date"


class InvalidInstallmentPlan(ValidationError):
    code = "invalid_installment_plan"


class InsufficientStock(StateConflictError):
    code = "insufficient_stock"


class InvalidStockOperation(StateConflictError):
    code = "invalid_stock_operation"


class OverpaymentError(StateConflictError):
    code = "overpayment"


__all__ = [
    "InsufficientStock",
    "InvalidDate",
    "InvalidDiscount",
    "InvalidInstallmentPlan",
    "InvalidStockOperation",
    "LedgerError",
    "NotFoundError",
    "OverpaymentError",
    "StateConflictError",
    "StoreError",
    "ValidationError",
]
