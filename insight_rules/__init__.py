"""
insight-rules - Rule bodies for CloudWatch Contributor Insights.

Builds, validates and serializes the JSON rule body of a contributor
insights rule. Until the application configures structlog, for example with
``insight_rules.logging.setup_logging``, only warnings are logged, to stderr.
"""

from .errors import (
    InsightRuleError,
    IncompleteFilterError,
    OperandCardinalityError,
    SchemaValidationError,
)
from .rules import (
    RuleBody,
    CloudWatchLogsV1RuleBody,
    CustomRuleBody,
    CloudWatchLogsRuleDescription,
    Contribution,
    RuleSchema,
    LogFormat,
    Aggregation,
    Filter,
    FilterBuilder,
    FilterOperation,
    FilterStatistic,
    all_of,
    from_filter,
    build,
    build_from_file,
)

__version__ = "0.1.0"

__all__ = [
    "InsightRuleError",
    "IncompleteFilterError",
    "OperandCardinalityError",
    "SchemaValidationError",
    "RuleBody",
    "CloudWatchLogsV1RuleBody",
    "CustomRuleBody",
    "CloudWatchLogsRuleDescription",
    "Contribution",
    "RuleSchema",
    "LogFormat",
    "Aggregation",
    "Filter",
    "FilterBuilder",
    "FilterOperation",
    "FilterStatistic",
    "all_of",
    "from_filter",
    "build",
    "build_from_file",
]
