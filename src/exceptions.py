"""Custom exceptions for StockLens."""


class StockLensError(Exception):
    """Base exception for all StockLens errors."""

    status_code = 500
    error_code = "internal_error"


class ConfigError(StockLensError):
    """Configuration-related errors."""


class DatabaseError(StockLensError):
    """Database operation errors."""


class NotFoundError(StockLensError):
    """Unknown part, product, plan or receipt."""

    status_code = 404
    error_code = "not_found"


class InvalidInputError(StockLensError):
    """Non-positive quantity, malformed date, unknown reason code."""

    status_code = 400
    error_code = "invalid_input"


class InvalidStateTransitionError(StockLensError):
    """Receipt status change not permitted from the current state."""

    status_code = 409
    error_code = "invalid_state_transition"


class InsufficientStockError(StockLensError):
    """A stock decrease would drive current_stock below reserved_stock."""

    status_code = 409
    error_code = "insufficient_stock"


class ConflictError(StockLensError):
    """Duplicate code on create."""

    status_code = 409
    error_code = "conflict"
