"""
Order flow errors.

Both aggregators fail fast with these at call time. Nothing in the core
catches them; the caller decides what an empty chart looks like.
"""


class OrderFlowError(ValueError):
    """Base class for order flow computation errors."""


class EmptyInputError(OrderFlowError):
    """No trade events were supplied."""


class InvalidParameterError(OrderFlowError):
    """A width, bucket size or fraction is out of range."""
