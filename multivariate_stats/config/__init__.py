"""Configuration management using Pydantic v2 models.

Sub-modules:
    core: ``StatisticsConfig``, the master configuration with YAML loading,
        logging setup and accumulator construction.
    exceptions: ``ConfigurationError``.
    reporting: Logging and report rendering configs.
    utils: Dictionary merge helpers.

Examples:
    Quick start::

        from multivariate_stats.config import StatisticsConfig

        config = StatisticsConfig(dimension=3, bias_corrected=False)
        config.setup_logging()
        stats = config.create_accumulator()
"""

from .exceptions import ConfigurationError
from .reporting import LoggingConfig, ReportConfig

__all__ = [
    "ConfigurationError",
    "LoggingConfig",
    "ReportConfig",
    "StatisticsConfig",
]


def __getattr__(name):
    """Lazy import of ``StatisticsConfig``; core depends on the accumulator modules."""
    if name == "StatisticsConfig":
        from .core import StatisticsConfig

        return StatisticsConfig
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
