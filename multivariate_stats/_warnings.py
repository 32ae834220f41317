"""Custom warning classes for the multivariate_stats package.

These warning classes allow users to programmatically filter, suppress,
or capture warnings using Python's standard ``warnings`` module.

Example:
    Silence data-quality warnings when ingesting signed data with the
    ``"nan"`` log-domain policy::

        import warnings
        from multivariate_stats._warnings import DataQualityWarning

        warnings.filterwarnings("ignore", category=DataQualityWarning)
"""


class MultivariateStatsWarning(UserWarning):
    """Base class for all multivariate_stats warnings."""


class DataQualityWarning(MultivariateStatsWarning):
    """Runtime data-quality observations.

    Raised when ingestion accepts values that leave a statistic undefined,
    such as non-positive values fed to a sum of logarithms under the
    ``"nan"`` log-domain policy.
    """
