"""Storeless multivariate summary statistics.

:class:`MultivariateSummaryStatistics` ingests vectors of a fixed dimension
``k`` and keeps, for each dimension, one storeless statistic per moment (sum,
sum of squares, sum of logs, min, max, mean and geometric mean) plus a
:class:`~multivariate_stats.covariance.VectorialCovariance` for the
cross-products. None of the input vectors are retained.

Derived statistics (standard deviation, covariance) are computed on demand
from the running moments and the count ``n``.

Example:
    Summarise a small stream of 2-D points::

        from multivariate_stats import MultivariateSummaryStatistics

        stats = MultivariateSummaryStatistics(2, bias_corrected=True)
        for point in ([1.0, 2.0], [3.0, 4.0], [5.0, 6.0]):
            stats.add_value(point)

        stats.get_mean()        # array([3., 4.])
        stats.get_covariance()  # array([[4., 4.], [4., 4.]])
"""

from __future__ import annotations

import logging
from typing import List, Literal, Optional, Sequence
import warnings

import numpy as np

from ._warnings import DataQualityWarning
from .config.exceptions import ConfigurationError
from .covariance import VectorialCovariance
from .errors import DimensionMismatchError, DomainError, InvalidStateError
from .report import SummaryReportGenerator
from .storeless import (
    GeometricMean,
    Max,
    Mean,
    Min,
    StorelessStatistic,
    Sum,
    SumOfLogs,
    SumOfSquares,
)
from .summary import MultivariateSummary, SummarySource

logger = logging.getLogger(__name__)

LogDomainPolicy = Literal["raise", "nan"]
UndefinedPolicy = Literal["nan", "raise"]


class MultivariateSummaryStatistics(SummarySource):
    """Running per-dimension moments and covariance over k-dimensional vectors.

    Args:
        dimension: Number of components ``k`` in every vector. Must be a
            positive integer.
        bias_corrected: If True (default) variance and covariance use the
            unbiased ``n - 1`` denominator, otherwise the population ``n``.
        log_domain: ``"raise"`` (default) rejects any vector holding a value
            that is not strictly positive (NaN included) with
            :class:`DomainError` before state is touched.
            ``"nan"`` accepts it, emits a :class:`DataQualityWarning` and lets
            the sum of logs and geometric mean for that dimension go to
            ``-inf``/``nan``.
        undefined: ``"nan"`` (default) returns NaN (or zeros for the spread
            of a single observation) for statistics that are undefined at the
            current count. ``"raise"`` raises :class:`InvalidStateError`.

    Raises:
        ConfigurationError: If ``dimension`` is not a positive integer or a
            policy is unknown.

    Thread Safety:
        This class is **not** thread-safe. Share one instance between threads
        only through
        :class:`~multivariate_stats.synchronized.SynchronizedMultivariateSummaryStatistics`.
    """

    def __init__(
        self,
        dimension: int,
        bias_corrected: bool = True,
        *,
        log_domain: LogDomainPolicy = "raise",
        undefined: UndefinedPolicy = "nan",
    ) -> None:
        issues = []
        if isinstance(dimension, bool) or not isinstance(dimension, (int, np.integer)):
            issues.append(f"dimension must be an integer, got {type(dimension).__name__}")
        elif dimension <= 0:
            issues.append(f"dimension must be positive, got {dimension}")
        if log_domain not in ("raise", "nan"):
            issues.append(f"log_domain must be 'raise' or 'nan', got {log_domain!r}")
        if undefined not in ("nan", "raise"):
            issues.append(f"undefined must be 'nan' or 'raise', got {undefined!r}")
        if issues:
            raise ConfigurationError(issues)

        self._dimension = int(dimension)
        self._bias_corrected = bool(bias_corrected)
        self._log_domain = log_domain
        self._undefined = undefined
        self._n = 0

        strict_logs = log_domain == "raise"
        k = self._dimension
        self._sum_impl: List[StorelessStatistic] = [Sum() for _ in range(k)]
        self._sumsq_impl: List[StorelessStatistic] = [SumOfSquares() for _ in range(k)]
        self._min_impl: List[StorelessStatistic] = [Min() for _ in range(k)]
        self._max_impl: List[StorelessStatistic] = [Max() for _ in range(k)]
        self._sum_log_impl: List[StorelessStatistic] = [SumOfLogs(strict_logs) for _ in range(k)]
        self._geo_mean_impl: List[StorelessStatistic] = [
            GeometricMean(SumOfLogs(strict_logs)) for _ in range(k)
        ]
        self._mean_impl: List[StorelessStatistic] = [Mean() for _ in range(k)]
        self._covariance = VectorialCovariance(k, self._bias_corrected)

        logger.debug(
            "Created %s(dimension=%d, bias_corrected=%s)",
            type(self).__name__,
            k,
            self._bias_corrected,
        )

    # ------------------------------------------------------------------ #
    #  Ingestion
    # ------------------------------------------------------------------ #

    def _check_vector(self, value: Sequence[float]) -> np.ndarray:
        vector = np.asarray(value, dtype=np.float64)
        if vector.ndim != 1:
            raise DimensionMismatchError(vector.size, self._dimension)
        if vector.shape[0] != self._dimension:
            raise DimensionMismatchError(vector.shape[0], self._dimension)
        self._check_log_domain(vector)
        return vector

    def _check_log_domain(self, values: np.ndarray) -> None:
        # NaN fails ``> 0`` as well, matching what SumOfLogs accepts
        outside = ~(values > 0)
        if not outside.any():
            return
        flat = values.ravel()
        if self._log_domain == "raise":
            index = int(np.argmax(outside.ravel()))
            raise DomainError(float(flat[index]), index % self._dimension)
        # Installed log statistics may still be strict; try them on copies first
        for index in np.flatnonzero(outside.ravel()).tolist():
            dim = index % self._dimension
            for stat in (self._sum_log_impl[dim], self._geo_mean_impl[dim]):
                stat.copy().increment(float(flat[index]))
        warnings.warn(
            "Non-positive values ingested; sum of logs and geometric mean are undefined "
            "for the affected dimensions",
            DataQualityWarning,
            stacklevel=3,
        )

    def _increment(self, vector: np.ndarray) -> None:
        for i, x in enumerate(vector.tolist()):
            self._sum_impl[i].increment(x)
            self._sumsq_impl[i].increment(x)
            self._min_impl[i].increment(x)
            self._max_impl[i].increment(x)
            self._sum_log_impl[i].increment(x)
            self._geo_mean_impl[i].increment(x)
            self._mean_impl[i].increment(x)
        self._covariance.increment(vector)
        self._n += 1

    def add_value(self, value: Sequence[float]) -> None:
        """Add one k-dimensional vector.

        Args:
            value: Sequence or array of length ``k``.

        Raises:
            DimensionMismatchError: If ``len(value) != k``.
            DomainError: If a value is <= 0 or NaN and ``log_domain == "raise"``,
                or an installed log statistic rejects it under ``"nan"``.
        """
        self._increment(self._check_vector(value))

    def add_values(self, values: Sequence[Sequence[float]]) -> None:
        """Add a batch of vectors, validating the whole batch first.

        Args:
            values: Array-like of shape ``(m, k)``.

        Raises:
            DimensionMismatchError: If the batch is not 2-D with ``k`` columns.
            DomainError: If a value is <= 0 or NaN and ``log_domain == "raise"``,
                or an installed log statistic rejects it under ``"nan"``.
        """
        batch = np.asarray(values, dtype=np.float64)
        if batch.size == 0:
            return
        if batch.ndim != 2:
            raise DimensionMismatchError(batch.shape[-1], self._dimension)
        if batch.shape[1] != self._dimension:
            raise DimensionMismatchError(batch.shape[1], self._dimension)
        self._check_log_domain(batch)
        for row in batch:
            self._increment(row)
        logger.debug("Ingested batch of %d vectors, n=%d", batch.shape[0], self._n)

    def clear(self) -> None:
        """Reset ``n`` and every running moment; dimension and policies are kept."""
        self._n = 0
        for impls in self._all_impls():
            for stat in impls:
                stat.clear()
        self._covariance.clear()
        logger.debug("Cleared %s(dimension=%d)", type(self).__name__, self._dimension)

    # ------------------------------------------------------------------ #
    #  Raw accessors
    # ------------------------------------------------------------------ #

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def bias_corrected(self) -> bool:
        return self._bias_corrected

    @property
    def log_domain(self) -> str:
        """Policy for non-positive values; fixed at construction."""
        return self._log_domain

    @property
    def undefined(self) -> str:
        return self._undefined

    def get_dimension(self) -> int:
        return self._dimension

    def is_bias_corrected(self) -> bool:
        return self._bias_corrected

    def get_n(self) -> int:
        return self._n

    @staticmethod
    def _results(impls: Sequence[StorelessStatistic]) -> np.ndarray:
        return np.array([stat.get_result() for stat in impls], dtype=np.float64)

    def get_sum(self) -> np.ndarray:
        return self._results(self._sum_impl)

    def get_sum_sq(self) -> np.ndarray:
        return self._results(self._sumsq_impl)

    def get_sum_log(self) -> np.ndarray:
        return self._results(self._sum_log_impl)

    def get_min(self) -> np.ndarray:
        """Return the per-dimension minimum (NaN when ``n == 0``)."""
        self._require(self._n > 0, "minimum")
        return self._results(self._min_impl)

    def get_max(self) -> np.ndarray:
        """Return the per-dimension maximum (NaN when ``n == 0``)."""
        self._require(self._n > 0, "maximum")
        return self._results(self._max_impl)

    # ------------------------------------------------------------------ #
    #  Derived statistics
    # ------------------------------------------------------------------ #

    def _require(self, defined: bool, what: str) -> None:
        if not defined and self._undefined == "raise":
            raise InvalidStateError(
                f"{what} is undefined for n={self._n} (bias_corrected={self._bias_corrected})"
            )

    def _spread_defined(self) -> bool:
        return self._n > (1 if self._bias_corrected else 0)

    def get_mean(self) -> np.ndarray:
        """Return the per-dimension arithmetic mean (NaN when ``n == 0``)."""
        self._require(self._n > 0, "mean")
        return self._results(self._mean_impl)

    def get_geometric_mean(self) -> np.ndarray:
        """Return the per-dimension geometric mean, ``exp(sum_log / n)``.

        Dimensions that saw a non-positive value under the ``"nan"`` policy
        report 0.0 or NaN.
        """
        self._require(self._n > 0, "geometric mean")
        return self._results(self._geo_mean_impl)

    def get_standard_deviation(self) -> np.ndarray:
        """Return the per-dimension standard deviation.

        Computed as ``sqrt((sum_sq - sum**2 / n) / (n - bias))`` where
        ``bias`` is 1 for bias-corrected statistics. NaN when ``n == 0`` and
        zeros when ``n == 1``, unless ``undefined == "raise"``.
        """
        self._require(self._spread_defined(), "standard deviation")
        return self._standard_deviation()

    def _standard_deviation(self) -> np.ndarray:
        k = self._dimension
        if self._n == 0:
            return np.full(k, np.nan)
        if self._n == 1:
            return np.zeros(k)
        n = self._n
        sums = self.get_sum()
        denominator = n - 1 if self._bias_corrected else n
        variance = (self.get_sum_sq() - sums * sums / n) / denominator
        return np.sqrt(np.maximum(variance, 0.0))

    def get_covariance(self) -> np.ndarray:
        """Return the k x k covariance matrix.

        ``cov[i][j] = (sum(x_i * x_j) - sum(x_i) * sum(x_j) / n) / (n - bias)``.
        NaN-filled when ``n == 0`` and zeros when ``n == 1``, unless
        ``undefined == "raise"``.
        """
        self._require(self._spread_defined(), "covariance")
        return self._covariance_matrix()

    def _covariance_matrix(self) -> np.ndarray:
        if self._n == 0:
            return np.full((self._dimension, self._dimension), np.nan)
        return self._covariance.get_result()

    def summary(self) -> MultivariateSummary:
        """Return an immutable snapshot of every statistic.

        The snapshot always uses NaN for undefined values, whatever the
        ``undefined`` policy.
        """
        return MultivariateSummary(
            n=self._n,
            dimension=self._dimension,
            bias_corrected=self._bias_corrected,
            sum=self.get_sum(),
            sum_sq=self.get_sum_sq(),
            sum_log=self.get_sum_log(),
            mean=self._results(self._mean_impl),
            min=self._results(self._min_impl),
            max=self._results(self._max_impl),
            geometric_mean=self._results(self._geo_mean_impl),
            standard_deviation=self._standard_deviation(),
            covariance=self._covariance_matrix(),
        )

    def copy(self) -> "MultivariateSummaryStatistics":
        """Return an independent accumulator with identical state and policies."""
        result = MultivariateSummaryStatistics(
            self._dimension,
            self._bias_corrected,
            log_domain=self._log_domain,
            undefined=self._undefined,
        )
        result._n = self._n
        result._sum_impl = [stat.copy() for stat in self._sum_impl]
        result._sumsq_impl = [stat.copy() for stat in self._sumsq_impl]
        result._min_impl = [stat.copy() for stat in self._min_impl]
        result._max_impl = [stat.copy() for stat in self._max_impl]
        result._sum_log_impl = [stat.copy() for stat in self._sum_log_impl]
        result._geo_mean_impl = [stat.copy() for stat in self._geo_mean_impl]
        result._mean_impl = [stat.copy() for stat in self._mean_impl]
        result._covariance = self._covariance.copy()
        return result

    # ------------------------------------------------------------------ #
    #  Implementation objects
    # ------------------------------------------------------------------ #

    def _all_impls(self) -> List[List[StorelessStatistic]]:
        return [
            self._sum_impl,
            self._sumsq_impl,
            self._min_impl,
            self._max_impl,
            self._sum_log_impl,
            self._geo_mean_impl,
            self._mean_impl,
        ]

    def _replace_impl(self, name: str, impls: Sequence[StorelessStatistic]) -> None:
        if self._n > 0:
            raise InvalidStateError(
                f"{name} implementations cannot be replaced after values have been added "
                f"(n={self._n})"
            )
        impls = list(impls)
        if len(impls) != self._dimension:
            raise DimensionMismatchError(len(impls), self._dimension)
        for stat in impls:
            if not isinstance(stat, StorelessStatistic):
                raise TypeError(
                    f"{name} implementations must be StorelessStatistic, got {type(stat).__name__}"
                )
        setattr(self, f"_{name}_impl", impls)
        logger.debug(
            "Installed %s implementations: %s",
            name,
            sorted({type(stat).__name__ for stat in impls}),
        )

    def get_sum_impl(self) -> List[StorelessStatistic]:
        return list(self._sum_impl)

    def set_sum_impl(self, sum_impl: Sequence[StorelessStatistic]) -> None:
        self._replace_impl("sum", sum_impl)

    def get_sumsq_impl(self) -> List[StorelessStatistic]:
        return list(self._sumsq_impl)

    def set_sumsq_impl(self, sumsq_impl: Sequence[StorelessStatistic]) -> None:
        self._replace_impl("sumsq", sumsq_impl)

    def get_min_impl(self) -> List[StorelessStatistic]:
        return list(self._min_impl)

    def set_min_impl(self, min_impl: Sequence[StorelessStatistic]) -> None:
        self._replace_impl("min", min_impl)

    def get_max_impl(self) -> List[StorelessStatistic]:
        return list(self._max_impl)

    def set_max_impl(self, max_impl: Sequence[StorelessStatistic]) -> None:
        self._replace_impl("max", max_impl)

    def get_sum_log_impl(self) -> List[StorelessStatistic]:
        return list(self._sum_log_impl)

    def set_sum_log_impl(self, sum_log_impl: Sequence[StorelessStatistic]) -> None:
        self._replace_impl("sum_log", sum_log_impl)

    def get_geo_mean_impl(self) -> List[StorelessStatistic]:
        return list(self._geo_mean_impl)

    def set_geo_mean_impl(self, geo_mean_impl: Sequence[StorelessStatistic]) -> None:
        self._replace_impl("geo_mean", geo_mean_impl)

    def get_mean_impl(self) -> List[StorelessStatistic]:
        return list(self._mean_impl)

    def set_mean_impl(self, mean_impl: Sequence[StorelessStatistic]) -> None:
        self._replace_impl("mean", mean_impl)

    # ------------------------------------------------------------------ #
    #  Presentation and comparison
    # ------------------------------------------------------------------ #

    def report(self, style: str = "text", precision: Optional[int] = None) -> str:
        """Render the current state with :class:`SummaryReportGenerator`."""
        return SummaryReportGenerator(style, precision).generate_report(
            self.summary(), title=type(self).__name__
        )

    def __str__(self) -> str:
        return self.report()

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(dimension={self._dimension}, "
            f"bias_corrected={self._bias_corrected}, n={self._n})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SummarySource):
            return NotImplemented
        return self.summary() == other.summary()

    def __hash__(self) -> int:
        """Hash of the current snapshot.

        The value changes after ``add_value``, ``add_values`` or ``clear``, so an
        instance must not be kept in a set or used as a dict key across mutations.
        """
        return hash(self.summary())
