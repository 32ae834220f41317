"""Multivariate Stats: storeless multivariate summary statistics"""

from ._version import __version__
from .accumulator import MultivariateSummaryStatistics
from .config.core import StatisticsConfig
from .config.exceptions import ConfigurationError
from .covariance import VectorialCovariance
from .errors import DimensionMismatchError, DomainError, InvalidStateError, MultivariateStatsError
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
from .summary import MultivariateSummary
from .synchronized import SynchronizedMultivariateSummaryStatistics

__all__ = [
    "__version__",
    "ConfigurationError",
    "DimensionMismatchError",
    "DomainError",
    "GeometricMean",
    "InvalidStateError",
    "Max",
    "Mean",
    "Min",
    "MultivariateStatsError",
    "MultivariateSummary",
    "MultivariateSummaryStatistics",
    "StatisticsConfig",
    "StorelessStatistic",
    "Sum",
    "SumOfLogs",
    "SumOfSquares",
    "SummaryReportGenerator",
    "SynchronizedMultivariateSummaryStatistics",
    "VectorialCovariance",
]
