"""Storeless univariate statistics.

A storeless statistic consumes values one at a time and keeps only the
fixed-size running state needed to answer its own query. The input history
is never retained.

Every variant implements the same small capability set (``increment``,
``get_result``, ``get_n``, ``clear`` and ``copy``), so the accumulators in
:mod:`multivariate_stats.accumulator` can hold any mix of them per dimension
and callers may install their own algorithms.

Example:
    Compute a sum of logs over a stream::

        from multivariate_stats.storeless import SumOfLogs

        stat = SumOfLogs()
        for value in (1.0, 2.0, 4.0):
            stat.increment(value)
        stat.get_result()  # ln(8)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import math
from typing import Iterable, Optional

from .errors import DomainError


def _same_float(a: float, b: float) -> bool:
    if math.isnan(a) and math.isnan(b):
        return True
    return a == b


def _hashable_float(value: float) -> Optional[float]:
    # hash(nan) is identity based, so NaN must map to a fixed key
    return None if math.isnan(value) else value


class StorelessStatistic(ABC):
    """Running statistic updated one value at a time."""

    @abstractmethod
    def increment(self, value: float) -> None:
        """Update the internal state with a new value."""

    @abstractmethod
    def get_result(self) -> float:
        """Return the statistic for the values seen so far."""

    @abstractmethod
    def get_n(self) -> int:
        """Return the number of values seen so far."""

    @abstractmethod
    def clear(self) -> None:
        """Reset to the identity state of the statistic."""

    @abstractmethod
    def copy(self) -> "StorelessStatistic":
        """Return an independent instance with identical state."""

    def increment_all(self, values: Iterable[float]) -> None:
        """Feed every value of ``values`` in order."""
        for value in values:
            self.increment(value)

    def evaluate(self, values: Iterable[float]) -> float:
        """Compute the statistic over ``values`` without touching this instance.

        Args:
            values: Values to evaluate.

        Returns:
            Result of a cleared copy fed with ``values``.
        """
        stat = self.copy()
        stat.clear()
        stat.increment_all(values)
        return stat.get_result()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StorelessStatistic) or type(other) is not type(self):
            return NotImplemented
        return self.get_n() == other.get_n() and _same_float(
            self.get_result(), other.get_result()
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.get_n(), _hashable_float(self.get_result())))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={self.get_n()}, result={self.get_result()!r})"


class Sum(StorelessStatistic):
    """Running sum of the values."""

    def __init__(self) -> None:
        self._n = 0
        self._value = 0.0

    def increment(self, value: float) -> None:
        self._value += value
        self._n += 1

    def get_result(self) -> float:
        return self._value

    def get_n(self) -> int:
        return self._n

    def clear(self) -> None:
        self._n = 0
        self._value = 0.0

    def copy(self) -> "Sum":
        result = Sum()
        result._n = self._n
        result._value = self._value
        return result


class SumOfSquares(Sum):
    """Running sum of the squared values."""

    def increment(self, value: float) -> None:
        super().increment(value * value)

    def copy(self) -> "SumOfSquares":
        result = SumOfSquares()
        result._n = self._n
        result._value = self._value
        return result


class SumOfLogs(StorelessStatistic):
    """Running sum of the natural logarithms of the values.

    Args:
        strict: If True (default), a value <= 0 raises :class:`DomainError`
            and leaves the state unchanged. If False, zero contributes
            ``-inf`` and negative values contribute ``nan``.
    """

    def __init__(self, strict: bool = True) -> None:
        self.strict = strict
        self._n = 0
        self._value = 0.0

    def increment(self, value: float) -> None:
        if value > 0:
            self._value += math.log(value)
        elif self.strict:
            raise DomainError(value)
        elif value == 0:
            self._value += -math.inf
        else:
            self._value += math.nan
        self._n += 1

    def get_result(self) -> float:
        return self._value

    def get_n(self) -> int:
        return self._n

    def clear(self) -> None:
        self._n = 0
        self._value = 0.0

    def copy(self) -> "SumOfLogs":
        result = SumOfLogs(strict=self.strict)
        result._n = self._n
        result._value = self._value
        return result


class Min(StorelessStatistic):
    """Running minimum. NaN values are counted but never become the minimum."""

    def __init__(self) -> None:
        self._n = 0
        self._value = math.inf

    def increment(self, value: float) -> None:
        if value < self._value:
            self._value = value
        self._n += 1

    def get_result(self) -> float:
        if self._n == 0:
            return math.nan
        return self._value

    def get_n(self) -> int:
        return self._n

    def clear(self) -> None:
        self._n = 0
        self._value = math.inf

    def copy(self) -> "Min":
        result = Min()
        result._n = self._n
        result._value = self._value
        return result


class Max(StorelessStatistic):
    """Running maximum. NaN values are counted but never become the maximum."""

    def __init__(self) -> None:
        self._n = 0
        self._value = -math.inf

    def increment(self, value: float) -> None:
        if value > self._value:
            self._value = value
        self._n += 1

    def get_result(self) -> float:
        if self._n == 0:
            return math.nan
        return self._value

    def get_n(self) -> int:
        return self._n

    def clear(self) -> None:
        self._n = 0
        self._value = -math.inf

    def copy(self) -> "Max":
        result = Max()
        result._n = self._n
        result._value = self._value
        return result


class Mean(StorelessStatistic):
    """Running arithmetic mean, updated as ``m1 += (x - m1) / n``."""

    def __init__(self) -> None:
        self._n = 0
        self._m1 = 0.0

    def increment(self, value: float) -> None:
        self._n += 1
        self._m1 += (value - self._m1) / self._n

    def get_result(self) -> float:
        if self._n == 0:
            return math.nan
        return self._m1

    def get_n(self) -> int:
        return self._n

    def clear(self) -> None:
        self._n = 0
        self._m1 = 0.0

    def copy(self) -> "Mean":
        result = Mean()
        result._n = self._n
        result._m1 = self._m1
        return result


class GeometricMean(StorelessStatistic):
    """Geometric mean, ``exp(sum_of_logs / n)``.

    Args:
        sum_of_logs: Optional :class:`SumOfLogs` (or compatible statistic) to
            delegate to. It must be empty; a fresh strict ``SumOfLogs`` is
            used when omitted.
    """

    def __init__(self, sum_of_logs: Optional[StorelessStatistic] = None) -> None:
        if sum_of_logs is None:
            sum_of_logs = SumOfLogs()
        elif sum_of_logs.get_n() > 0:
            raise ValueError("GeometricMean requires an empty sum-of-logs statistic")
        self._sum_of_logs = sum_of_logs

    def increment(self, value: float) -> None:
        self._sum_of_logs.increment(value)

    def get_result(self) -> float:
        n = self._sum_of_logs.get_n()
        if n == 0:
            return math.nan
        return math.exp(self._sum_of_logs.get_result() / n)

    def get_n(self) -> int:
        return self._sum_of_logs.get_n()

    def clear(self) -> None:
        self._sum_of_logs.clear()

    def copy(self) -> "GeometricMean":
        result = GeometricMean()
        result._sum_of_logs = self._sum_of_logs.copy()
        return result
