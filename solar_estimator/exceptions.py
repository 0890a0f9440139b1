"""Domain errors raised by the estimator engines."""


class EstimatorError(ValueError):
    """Base class for all estimator input errors."""


class InvalidDimensionError(EstimatorError):
    """A length or count is non-positive, negative or not finite."""

    def __init__(self, field: str, value, message: str = ""):
        self.field = field
        self.value = value
        super().__init__(message or f"{field} must be a positive finite number (got {value!r})")


class InfeasibleLayoutError(EstimatorError):
    """The request is well-formed but cannot be built from the rod stock."""
