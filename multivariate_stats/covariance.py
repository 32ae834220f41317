"""Running cross-product sums for multivariate covariance.

Off-diagonal covariance cannot be recovered from per-dimension moments alone,
so :class:`VectorialCovariance` keeps the running sum of each dimension plus
the packed lower triangle of running cross-products ``sum(x_i * x_j)`` for
``i >= j``. Both are updated from the same vector in one pass.
"""

from __future__ import annotations

import numpy as np


class VectorialCovariance:
    """Storeless covariance matrix over vectors of fixed dimension.

    Args:
        dimension: Length of every incremented vector.
        bias_corrected: If True the ``n - 1`` denominator is used,
            otherwise ``n``.
    """

    def __init__(self, dimension: int, bias_corrected: bool = True) -> None:
        self.dimension = dimension
        self.bias_corrected = bias_corrected
        self._rows, self._cols = np.tril_indices(dimension)
        self._n = 0
        self._sums = np.zeros(dimension, dtype=np.float64)
        self._products = np.zeros(len(self._rows), dtype=np.float64)

    def increment(self, vector: np.ndarray) -> None:
        """Add one vector. The caller guarantees ``len(vector) == dimension``."""
        self._sums += vector
        self._products += vector[self._rows] * vector[self._cols]
        self._n += 1

    def get_n(self) -> int:
        return self._n

    def get_result(self) -> np.ndarray:
        """Return the symmetric ``dimension x dimension`` covariance matrix.

        The matrix is all zeros while fewer than two vectors have been seen.
        Diagonal round-off below zero is clamped to zero.
        """
        result = np.zeros((self.dimension, self.dimension), dtype=np.float64)
        if self._n > 1:
            denominator = self._n - 1 if self.bias_corrected else self._n
            packed = (
                self._products - self._sums[self._rows] * self._sums[self._cols] / self._n
            ) / denominator
            result[self._rows, self._cols] = packed
            result[self._cols, self._rows] = packed
            np.fill_diagonal(result, np.maximum(np.diag(result), 0.0))
        return result

    def clear(self) -> None:
        self._n = 0
        self._sums.fill(0.0)
        self._products.fill(0.0)

    def copy(self) -> "VectorialCovariance":
        result = VectorialCovariance(self.dimension, self.bias_corrected)
        result._n = self._n
        result._sums = self._sums.copy()
        result._products = self._products.copy()
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VectorialCovariance):
            return NotImplemented
        return (
            self.dimension == other.dimension
            and self.bias_corrected == other.bias_corrected
            and self._n == other._n
            and np.array_equal(self._sums, other._sums, equal_nan=True)
            and np.array_equal(self._products, other._products, equal_nan=True)
        )

    __hash__ = None  # type: ignore[assignment]
