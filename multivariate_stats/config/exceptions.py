"""Custom exceptions for configuration validation."""

from ..errors import MultivariateStatsError


class ConfigurationError(MultivariateStatsError):
    """Raised when an accumulator is constructed with invalid parameters.

    Attributes:
        issues: List of specific configuration problems found.

    Examples:
        Catching and inspecting issues::

            try:
                MultivariateSummaryStatistics(0)
            except ConfigurationError as e:
                for issue in e.issues:
                    print(f"  - {issue}")
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = issues
        bullet_list = "\n".join(f"  - {issue}" for issue in issues)
        super().__init__(
            f"Configuration has {len(issues)} critical "
            f"{'issue' if len(issues) == 1 else 'issues'}:\n{bullet_list}"
        )
