"""
Rule body construction for CloudWatch Contributor Insights rules

Provides:
- Contribution filters and a fluent filter builder
- Version 1 CloudWatch Logs rule bodies with defaults and validation
- Custom rule bodies passed through unchanged
"""

from .base import RuleBody
from .body import (
    CLOUDWATCH_LOGS_V1_SCHEMA,
    CloudWatchLogsV1RuleBody,
    CustomRuleBody,
    apply_defaults,
    build,
    build_from_file,
    render_rule_body,
    validate_rule_body,
)
from .filters import (
    Filter,
    FilterBuilder,
    FilterOperation,
    FilterStatistic,
    NumericCondition,
    PresenceCondition,
    TextCondition,
    all_of,
    from_filter,
)
from .models import (
    Aggregation,
    CloudWatchLogsRuleDescription,
    Contribution,
    LogFormat,
    RuleSchema,
)

__all__ = [
    "RuleBody",
    "CLOUDWATCH_LOGS_V1_SCHEMA",
    "CloudWatchLogsV1RuleBody",
    "CustomRuleBody",
    "apply_defaults",
    "build",
    "build_from_file",
    "render_rule_body",
    "validate_rule_body",
    "Filter",
    "FilterBuilder",
    "FilterOperation",
    "FilterStatistic",
    "NumericCondition",
    "PresenceCondition",
    "TextCondition",
    "all_of",
    "from_filter",
    "Aggregation",
    "CloudWatchLogsRuleDescription",
    "Contribution",
    "LogFormat",
    "RuleSchema",
]
