"""Top-level accumulator configuration.

``StatisticsConfig`` bundles the construction parameters and policies of an
accumulator with logging and report settings, and can be loaded from or
saved to YAML.
"""

import logging
from pathlib import Path
import sys
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field
import yaml

from ..accumulator import MultivariateSummaryStatistics
from ..report import SummaryReportGenerator
from ..summary import SummarySource
from ..synchronized import SynchronizedMultivariateSummaryStatistics
from .reporting import LoggingConfig, ReportConfig
from .utils import deep_merge

Accumulator = Union[MultivariateSummaryStatistics, SynchronizedMultivariateSummaryStatistics]


class StatisticsConfig(BaseModel):
    """Complete configuration for a multivariate accumulator.

    Examples:
        Minimal usage::

            config = StatisticsConfig(dimension=3)
            stats = config.create_accumulator()

        From a YAML file::

            config = StatisticsConfig.from_yaml(Path("stats.yaml"))
    """

    dimension: int = Field(gt=0, description="Number of components in every vector")
    bias_corrected: bool = Field(
        default=True, description="Use the n - 1 denominator for variance and covariance"
    )
    log_domain: Literal["raise", "nan"] = Field(
        default="raise", description="Handling of values <= 0 fed to the sum of logs"
    )
    undefined: Literal["nan", "raise"] = Field(
        default="nan", description="Handling of statistics that are undefined at the current n"
    )
    thread_safe: bool = Field(
        default=True, description="Create the synchronized accumulator variant"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)

    @classmethod
    def from_yaml(cls, path: Path) -> "StatisticsConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            StatisticsConfig object with validated parameters.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValidationError: If configuration is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        # Remove private anchors if present
        data = {k: v for k, v in data.items() if not k.startswith("_")}

        return cls(**data)

    @classmethod
    def from_dict(
        cls, data: dict, base_config: Optional["StatisticsConfig"] = None
    ) -> "StatisticsConfig":
        """Create config from dictionary, optionally overriding base config.

        Args:
            data: Dictionary with configuration parameters.
            base_config: Optional base configuration to override.

        Returns:
            StatisticsConfig object with validated parameters.
        """
        if base_config is None:
            return cls(**data)
        return cls(**deep_merge(base_config.model_dump(), data))

    def to_yaml(self, path: Path) -> None:
        """Save configuration to YAML file.

        Args:
            path: Destination file; parent directories are created.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(self.model_dump(), f, default_flow_style=False, sort_keys=False)

    def setup_logging(self) -> None:
        """Configure the ``multivariate_stats`` logger from the logging section."""
        if not self.logging.enabled:
            return

        logger = logging.getLogger("multivariate_stats")
        logger.setLevel(getattr(logging, self.logging.level))
        logger.handlers.clear()

        formatter = logging.Formatter(self.logging.format)

        if self.logging.console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if self.logging.log_file:
            log_path = Path(self.logging.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    def create_accumulator(self) -> Accumulator:
        """Build an empty accumulator from this configuration.

        Returns:
            A :class:`SynchronizedMultivariateSummaryStatistics` when
            ``thread_safe`` is set, otherwise a plain
            :class:`MultivariateSummaryStatistics`.
        """
        cls = (
            SynchronizedMultivariateSummaryStatistics
            if self.thread_safe
            else MultivariateSummaryStatistics
        )
        return cls(
            self.dimension,
            self.bias_corrected,
            log_domain=self.log_domain,
            undefined=self.undefined,
        )

    def render(self, stats: SummarySource) -> str:
        """Render ``stats`` using the report section."""
        generator = SummaryReportGenerator(self.report.style, self.report.precision)
        return generator.generate_report(stats.summary(), title=self.report.title)
