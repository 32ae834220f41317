"""Formatted reports for multivariate summaries.

Reports are deterministic for a given snapshot (no timestamps), so they can
be used directly in snapshot-style tests.
"""

import html
import io
from typing import Any, Dict, Iterable, Optional

from .summary import MultivariateSummary

# (label, snapshot attribute) in report order
_TEXT_ROWS = (
    ("min", "min"),
    ("max", "max"),
    ("mean", "mean"),
    ("geometric mean", "geometric_mean"),
    ("sum of squares", "sum_sq"),
    ("sum of logarithms", "sum_log"),
    ("standard deviation", "standard_deviation"),
)


def format_value(value: float, precision: Optional[int] = None) -> str:
    """Format a single float, using ``repr`` when no precision is given."""
    if precision is None:
        return repr(float(value))
    return f"{float(value):.{precision}f}"


def _join(values: Iterable[float], precision: Optional[int]) -> str:
    return ", ".join(format_value(v, precision) for v in values)


class SummaryReportGenerator:
    """Render a :class:`MultivariateSummary` as text, Markdown or HTML."""

    STYLES = ("text", "markdown", "html")

    def __init__(self, style: str = "text", precision: Optional[int] = None):
        """Initialize report generator.

        Args:
            style: Report style (text, markdown, html)
            precision: Decimal places for values; ``None`` prints the
                shortest round-tripping representation.
        """
        if style not in self.STYLES:
            raise ValueError(f"Unsupported style: {style}")
        self.style = style
        self.precision = precision

    def generate_report(
        self,
        summary: MultivariateSummary,
        title: str = "MultivariateSummaryStatistics",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Generate formatted report.

        Args:
            summary: Snapshot to render
            title: Report title
            metadata: Additional metadata listed after the title

        Returns:
            Formatted report string
        """
        if self.style == "markdown":
            return self._generate_markdown_report(summary, title, metadata)
        if self.style == "html":
            return self._generate_html_report(summary, title, metadata)
        return self._generate_text_report(summary, title, metadata)

    def _generate_text_report(
        self, summary: MultivariateSummary, title: str, metadata: Optional[Dict[str, Any]]
    ) -> str:
        report = io.StringIO()
        report.write(f"{title}:\n")
        if metadata:
            for key, value in metadata.items():
                report.write(f"{key}: {value}\n")
        report.write(f"n: {summary.n}\n")
        for label, attr in _TEXT_ROWS:
            report.write(f"{label}: {_join(getattr(summary, attr), self.precision)}\n")
        report.write("covariance:\n")
        for row in summary.covariance:
            report.write(f"  {_join(row, self.precision)}\n")
        return report.getvalue()

    def _generate_markdown_report(
        self, summary: MultivariateSummary, title: str, metadata: Optional[Dict[str, Any]]
    ) -> str:
        report = io.StringIO()
        report.write(f"# {title}\n\n")

        if metadata:
            report.write("## Metadata\n\n")
            for key, value in metadata.items():
                report.write(f"- **{key}**: {value}\n")
            report.write("\n")

        report.write(f"- **n**: {summary.n}\n")
        report.write(f"- **dimension**: {summary.dimension}\n")
        report.write(f"- **bias corrected**: {summary.bias_corrected}\n\n")

        # One row per statistic, one column per dimension
        report.write("## Per-Dimension Statistics\n\n")
        dims = range(summary.dimension)
        report.write("| Statistic | " + " | ".join(f"x{i}" for i in dims) + " |\n")
        report.write("|-----------|" + "|".join("----" for _ in dims) + "|\n")
        for label, attr in _TEXT_ROWS:
            cells = " | ".join(format_value(v, self.precision) for v in getattr(summary, attr))
            report.write(f"| {label} | {cells} |\n")
        report.write("\n")

        report.write("## Covariance\n\n")
        report.write("| | " + " | ".join(f"x{i}" for i in dims) + " |\n")
        report.write("|---|" + "|".join("----" for _ in dims) + "|\n")
        for i, row in enumerate(summary.covariance):
            cells = " | ".join(format_value(v, self.precision) for v in row)
            report.write(f"| x{i} | {cells} |\n")

        return report.getvalue()

    def _generate_html_report(
        self, summary: MultivariateSummary, title: str, metadata: Optional[Dict[str, Any]]
    ) -> str:
        report = io.StringIO()
        report.write(f"<h1>{html.escape(title)}</h1>\n")

        if metadata:
            report.write("<ul>\n")
            for key, value in metadata.items():
                report.write(
                    f"<li><strong>{html.escape(str(key))}</strong>: "
                    f"{html.escape(str(value))}</li>\n"
                )
            report.write("</ul>\n")

        report.write(f"<p>n = {summary.n}</p>\n")
        report.write("<table>\n")
        for label, attr in _TEXT_ROWS:
            cells = "".join(
                f"<td>{format_value(v, self.precision)}</td>" for v in getattr(summary, attr)
            )
            report.write(f"<tr><th>{label}</th>{cells}</tr>\n")
        report.write("</table>\n")

        report.write("<h2>Covariance</h2>\n<table>\n")
        for row in summary.covariance:
            cells = "".join(f"<td>{format_value(v, self.precision)}</td>" for v in row)
            report.write(f"<tr>{cells}</tr>\n")
        report.write("</table>\n")

        return report.getvalue()
