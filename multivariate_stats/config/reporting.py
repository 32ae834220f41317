"""Logging and report configuration.

Contains configuration classes that control logging behavior and how
accumulator snapshots are rendered.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class LoggingConfig(BaseModel):
    """Logging configuration.

    Controls logging behavior including level, output destinations,
    and message formatting.
    """

    enabled: bool = Field(default=True, description="Enable logging")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (None=no file logging)"
    )
    console_output: bool = Field(default=True, description="Log to console")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )


class ReportConfig(BaseModel):
    """Report rendering configuration."""

    style: Literal["text", "markdown", "html"] = Field(
        default="text", description="Report output style"
    )
    precision: Optional[int] = Field(
        default=None, ge=0, le=17, description="Decimal places (None=shortest repr)"
    )
    title: str = Field(
        default="MultivariateSummaryStatistics", description="Report heading"
    )
