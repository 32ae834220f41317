"""Tests for configuration management."""

import logging

from pydantic import ValidationError
import pytest
import yaml

from multivariate_stats import (
    InvalidStateError,
    MultivariateSummaryStatistics,
    SynchronizedMultivariateSummaryStatistics,
)
from multivariate_stats.config import (
    ConfigurationError,
    LoggingConfig,
    ReportConfig,
    StatisticsConfig,
)
from multivariate_stats.config.utils import deep_merge


class TestStatisticsConfig:
    """Validation and defaults of the master config."""

    def test_defaults(self):
        """Only the dimension is required."""
        config = StatisticsConfig(dimension=3)
        assert config.bias_corrected is True
        assert config.log_domain == "raise"
        assert config.undefined == "nan"
        assert config.thread_safe is True
        assert isinstance(config.logging, LoggingConfig)
        assert isinstance(config.report, ReportConfig)

    @pytest.mark.parametrize("dimension", [0, -1])
    def test_invalid_dimension(self, dimension):
        """Non-positive dimensions are rejected."""
        with pytest.raises(ValidationError):
            StatisticsConfig(dimension=dimension)

    def test_invalid_policy(self):
        """Policies are restricted to their literal values."""
        with pytest.raises(ValidationError):
            StatisticsConfig(dimension=2, log_domain="ignore")

    def test_invalid_report_precision(self):
        """Negative precision is rejected."""
        with pytest.raises(ValidationError):
            ReportConfig(precision=-1)

    def test_configuration_error_message(self):
        """ConfigurationError lists every issue."""
        error = ConfigurationError(["first", "second"])
        assert error.issues == ["first", "second"]
        assert str(error) == "Configuration has 2 critical issues:\n  - first\n  - second"


class TestLoading:
    """YAML and dictionary round trips."""

    def test_from_yaml(self, tmp_path):
        """Keys starting with an underscore are ignored."""
        path = tmp_path / "stats.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "_defaults": {"dimension": 9},
                    "dimension": 4,
                    "bias_corrected": False,
                    "report": {"style": "markdown", "precision": 3},
                }
            ),
            encoding="utf-8",
        )
        config = StatisticsConfig.from_yaml(path)
        assert config.dimension == 4
        assert config.bias_corrected is False
        assert config.report.style == "markdown"
        assert config.report.precision == 3

    def test_from_yaml_missing(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            StatisticsConfig.from_yaml(tmp_path / "missing.yaml")

    def test_yaml_round_trip(self, tmp_path):
        """to_yaml writes what from_yaml reads."""
        config = StatisticsConfig(dimension=2, undefined="raise", thread_safe=False)
        path = tmp_path / "nested" / "stats.yaml"
        config.to_yaml(path)
        assert StatisticsConfig.from_yaml(path) == config

    def test_from_dict_with_base(self):
        """Overrides merge into nested sections."""
        base = StatisticsConfig(dimension=2, report=ReportConfig(style="html", precision=4))
        config = StatisticsConfig.from_dict({"report": {"precision": 1}}, base_config=base)
        assert config.dimension == 2
        assert config.report.style == "html"
        assert config.report.precision == 1

    def test_deep_merge_does_not_mutate(self):
        """deep_merge returns a new dictionary."""
        base = {"a": {"b": 1, "c": 2}}
        merged = deep_merge(base, {"a": {"b": 5}})
        assert merged == {"a": {"b": 5, "c": 2}}
        assert base == {"a": {"b": 1, "c": 2}}


class TestFactories:
    """Building accumulators, reports and logging from a config."""

    def test_create_thread_safe(self):
        """thread_safe selects the synchronized variant."""
        stats = StatisticsConfig(dimension=3).create_accumulator()
        assert isinstance(stats, SynchronizedMultivariateSummaryStatistics)
        assert stats.get_dimension() == 3

    def test_create_plain_with_policies(self):
        """Policies are passed through to the accumulator."""
        config = StatisticsConfig(
            dimension=2, bias_corrected=False, undefined="raise", thread_safe=False
        )
        stats = config.create_accumulator()
        assert type(stats) is MultivariateSummaryStatistics
        assert stats.is_bias_corrected() is False
        with pytest.raises(InvalidStateError):
            stats.get_mean()

    def test_render(self, example_stats):
        """render applies the report section."""
        config = StatisticsConfig(
            dimension=2, report=ReportConfig(style="markdown", precision=1, title="Sensors")
        )
        output = config.render(example_stats)
        assert output.startswith("# Sensors")
        assert "| max | 5.0 | 6.0 |" in output

    def test_setup_logging(self, tmp_path):
        """setup_logging installs console and file handlers on the package logger."""
        log_file = tmp_path / "logs" / "stats.log"
        config = StatisticsConfig(
            dimension=1, logging=LoggingConfig(level="DEBUG", log_file=str(log_file))
        )
        logger = logging.getLogger("multivariate_stats")
        try:
            config.setup_logging()
            assert logger.level == logging.DEBUG
            assert len(logger.handlers) == 2

            MultivariateSummaryStatistics(1).clear()
            for handler in logger.handlers:
                handler.flush()
            assert "Cleared MultivariateSummaryStatistics" in log_file.read_text()
        finally:
            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)
            logger.setLevel(logging.NOTSET)

    def test_setup_logging_disabled(self):
        """Disabled logging leaves the logger untouched."""
        logger = logging.getLogger("multivariate_stats")
        before = list(logger.handlers)
        StatisticsConfig(dimension=1, logging=LoggingConfig(enabled=False)).setup_logging()
        assert logger.handlers == before
