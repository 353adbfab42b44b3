"""Custom exceptions for model and order translation layers."""


class ModelError(Exception):
    """Base class for model-related failures."""


class ModelValidationError(ModelError):
    """Raised when model data fails custom business validation."""


class ModelNotFoundError(ModelError):
    """Raised when a requested reserve or record does not exist."""


class OrderPreconditionError(ModelValidationError):
    """Raised when an order translation precondition does not hold."""


class ObligationShapeError(OrderPreconditionError):
    """Raised when an obligation does not have the expected number of deposits or borrows."""


class OrderRangeError(OrderPreconditionError):
    """Raised when a threshold, amount or bonus rate is outside of its valid range."""


class PositionClassificationError(OrderPreconditionError):
    """Raised when an obligation cannot be classified as a long or a short position."""


class OrderCompatibilityError(OrderPreconditionError):
    """Raised when an order does not fit the obligation, the slot or the on-chain state."""


class ImmediatelyTriggeredOrderError(OrderPreconditionError):
    """Raised when an order's condition is already met at creation time."""
