"""
Exception taxonomy for fmgen.

Recoverable (caught by the generator and turned into a retry):
    - CapacityExceededError
    - StructuralFailure

Fatal (propagate to the caller):
    - GenerationFailure
    - InvariantViolation / PreconditionViolation
    - ConfigurationError
    - ModelError
"""

from typing import Optional


class FMGenError(Exception):
    """Base class for every error raised by fmgen."""
    pass


class ConfigurationError(FMGenError):
    """Raised when generation characteristics are invalid."""
    pass


class ModelError(FMGenError):
    """Raised when a feature model is built inconsistently."""
    pass


class CapacityExceededError(FMGenError):
    """
    Raised when an insertion would push a product collection past its capacity.

    Properties:
        capacity: Configured maximum number of products
        requested: Size the collection would have reached
    """

    def __init__(self, capacity: int, requested: int):
        self.capacity = capacity
        self.requested = requested
        super().__init__(
            f"Product capacity exceeded: {requested} products requested, capacity is {capacity}"
        )


class StructuralFailure(FMGenError):
    """Raised by a model builder when a random draw cannot be realized."""
    pass


class InvariantViolation(FMGenError):
    """Raised when a builder and the product-set maintainer disagree."""
    pass


class PreconditionViolation(InvariantViolation):
    """Raised when a primitive would produce duplicate or inconsistent products."""
    pass


class GenerationError(FMGenError):
    """Raised when generation results are requested in the wrong state."""
    pass


class GenerationFailure(GenerationError):
    """
    Raised after the attempt budget is exhausted.

    Properties:
        attempts: Number of failed attempts
        last_error: The recoverable error that ended the final attempt
    """

    def __init__(self, attempts: int, last_error: Optional[Exception] = None):
        self.attempts = attempts
        self.last_error = last_error
        message = (
            f"Too many generation attempts ({attempts}). "
            "Try to relax the input constraints"
        )
        if last_error is not None:
            message += f" (last error: {last_error})"
        super().__init__(message)
