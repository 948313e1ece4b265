"""Rule body description models."""
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Any
from enum import Enum

from .filters import Filter, FilterBuilder


class LogFormat(str, Enum):
    """Format the log groups emit their data in."""
    JSON = "JSON"
    CLF = "CLF"


class Aggregation(str, Enum):
    """Supported values for AggregateOn."""
    COUNT = "Count"
    SUM = "Sum"


class RuleSchema(BaseModel):
    """Name and version of a rule body schema."""
    model_config = ConfigDict(frozen=True)

    name: str
    version: int


class Contribution(BaseModel):
    """Which log fields identify a contributor, and which events count."""
    model_config = ConfigDict(frozen=True)

    keys: list[str] = Field(
        default_factory=list,
        description="Up to four log fields used to classify contributors"
    )
    value_of: str | None = Field(
        default=None,
        validation_alias=AliasChoices("value_of", "valueOf", "valueof"),
        description="Numeric log field contributors are summed by (AggregateOn Sum only)"
    )
    filters: list[Filter] | None = Field(
        default=None,
        description="Up to four filters, ANDed together"
    )

    @field_validator("filters", mode="before")
    @classmethod
    def build_pending_filters(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return [item.build() if isinstance(item, FilterBuilder) else item for item in v]
        return v


class CloudWatchLogsRuleDescription(BaseModel):
    """Description of a version 1 CloudWatch Logs rule body.

    Input keys may be snake_case or the camelCase used in rule body files.
    """
    model_config = ConfigDict(frozen=True)

    rule_schema: RuleSchema | None = Field(
        default=None,
        validation_alias=AliasChoices("rule_schema", "schema"),
        description="Defaults to the CloudWatchLogRule version 1 schema"
    )
    log_group_names: list[str] = Field(
        ...,
        validation_alias=AliasChoices("log_group_names", "logGroupNames"),
        description="Log groups the rule reads from"
    )
    log_format: LogFormat | None = Field(
        default=None,
        validation_alias=AliasChoices("log_format", "logFormat"),
        description="Defaults to CLF when fields are given, else JSON"
    )
    fields: dict[str, str] | None = Field(
        default=None,
        description="Aliases for CLF field indexes"
    )
    contribution: Contribution
    aggregate_on: Aggregation | None = Field(
        default=None,
        validation_alias=AliasChoices("aggregate_on", "aggregateOn"),
        description="Defaults to Sum when value_of is given, else Count"
    )

    @field_validator("fields", mode="before")
    @classmethod
    def stringify_field_indexes(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {str(index): alias for index, alias in v.items()}
        return v
