"""Typed failures raised by the accumulators.

All errors are raised synchronously and before any state is touched, so an
accumulator that raised is exactly as it was before the call.
"""

from typing import Optional


class MultivariateStatsError(Exception):
    """Base class for all multivariate_stats errors."""


class DimensionMismatchError(MultivariateStatsError, ValueError):
    """A vector or implementation list does not have the accumulator's length.

    Attributes:
        actual: Length that was supplied.
        expected: Dimension of the accumulator.
    """

    def __init__(self, actual: int, expected: int) -> None:
        self.actual = actual
        self.expected = expected
        super().__init__(f"dimension mismatch: got {actual}, expected {expected}")


class InvalidStateError(MultivariateStatsError, RuntimeError):
    """The requested operation is not valid for the accumulator's current state.

    Raised when implementation objects are replaced after values have been
    added, or when an undefined statistic is queried under the ``"raise"``
    policy (e.g. unbiased variance with a single observation).
    """


class DomainError(MultivariateStatsError, ValueError):
    """A value falls outside the domain of a statistic.

    Attributes:
        value: The offending value.
        index: Position of the value within the ingested vector, if known.
    """

    def __init__(self, value: float, index: Optional[int] = None) -> None:
        self.value = value
        self.index = index
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"logarithm undefined for non-positive value {value!r}{where}")
