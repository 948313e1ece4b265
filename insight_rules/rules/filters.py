"""Contribution filters for insight rule bodies.

A filter is one predicate over one log field, for example::

    {"Match": "$.httpMethod", "In": ["PUT"], "IgnoreCase": true}

The operation and its operand are chosen together as a single condition
variant, so a filter can never hold an operation with the wrong operand type.
"""
from enum import Enum
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import AllowInfNan, BaseModel, ConfigDict, Field, Strict, StrictInt, model_validator

from ..errors import IncompleteFilterError, OperandCardinalityError
from ..logging import get_logger

log = get_logger()

MIN_TEXT_OPERANDS = 1
MAX_TEXT_OPERANDS = 10


class FilterOperation(str, Enum):
    """Supported filter operations, valued by their wire key."""
    IN = "In"
    NOT_IN = "NotIn"
    STARTS_WITH = "StartsWith"
    GREATER_THAN = "GreaterThan"
    LESS_THAN = "LessThan"
    EQUAL_TO = "EqualTo"
    NOT_EQUAL_TO = "NotEqualTo"
    IS_PRESENT = "IsPresent"


class FilterStatistic(str, Enum):
    """How a field that occurs several times in one log entry is reduced."""
    SUM = "Sum"
    COUNT = "Count"
    AVERAGE = "Average"


def check_text_operand(operation: str, values: list[str]) -> None:
    """Raise OperandCardinalityError unless 1 <= len(values) <= 10."""
    if not MIN_TEXT_OPERANDS <= len(values) <= MAX_TEXT_OPERANDS:
        log.warning(
            "filter.operand_cardinality",
            operation=operation,
            length=len(values),
            minimum=MIN_TEXT_OPERANDS,
            maximum=MAX_TEXT_OPERANDS,
        )
        raise OperandCardinalityError(
            operation, len(values), MIN_TEXT_OPERANDS, MAX_TEXT_OPERANDS
        )


class TextCondition(BaseModel):
    """Match against a set of strings."""
    model_config = ConfigDict(frozen=True)

    operation: Literal["In", "NotIn", "StartsWith"]
    operand: list[str]

    @model_validator(mode="after")
    def validate_operand_count(self) -> "TextCondition":
        check_text_operand(self.operation, self.operand)
        return self


class NumericCondition(BaseModel):
    """Compare against a single number."""
    model_config = ConfigDict(frozen=True)

    operation: Literal["GreaterThan", "LessThan", "EqualTo", "NotEqualTo"]
    operand: StrictInt | Annotated[float, Strict(), AllowInfNan(False)]


class PresenceCondition(BaseModel):
    """Check whether the field exists in the log entry."""
    model_config = ConfigDict(frozen=True)

    operation: Literal["IsPresent"]
    operand: bool


FilterCondition = Annotated[
    Union[TextCondition, NumericCondition, PresenceCondition],
    Field(discriminator="operation"),
]

_OPERATION_KEYS = tuple(op.value for op in FilterOperation)


class Filter(BaseModel):
    """A single predicate over one log field."""
    model_config = ConfigDict(frozen=True)

    match: str = Field(..., description="Log field path the filter inspects")
    condition: FilterCondition | None = Field(
        default=None,
        description="Operation and operand; None until an operation is chosen",
    )
    ignore_case: bool | None = Field(
        default=None,
        description="Case-insensitive matching for text operations",
    )
    statistic: FilterStatistic | None = Field(
        default=None,
        description="Reduction for fields repeated within one log entry",
    )

    @model_validator(mode="before")
    @classmethod
    def from_wire_form(cls, data: Any) -> Any:
        """Accept the rendered form ({"Match": ..., "In": [...]}) as input."""
        if not isinstance(data, dict) or "Match" not in data:
            return data

        operations = [key for key in data if key in _OPERATION_KEYS]
        if len(operations) > 1:
            raise ValueError(
                f"A filter has exactly one operation, but {operations} were given"
            )

        converted: dict[str, Any] = {"match": data["Match"]}
        if operations:
            converted["condition"] = {
                "operation": operations[0],
                "operand": data[operations[0]],
            }
        if "IgnoreCase" in data:
            converted["ignore_case"] = data["IgnoreCase"]
        if "Statistic" in data:
            converted["statistic"] = data["Statistic"]
        return converted

    @property
    def operation(self) -> FilterOperation | None:
        if self.condition is None:
            return None
        return FilterOperation(self.condition.operation)

    def render(self) -> dict[str, Any]:
        """
        Render the filter in its wire form.

        Returns:
            Mapping with "Match", the operation key, and "IgnoreCase" and
            "Statistic" only when they were set

        Raises:
            IncompleteFilterError: If no operation has been chosen
        """
        if self.condition is None:
            log.warning("filter.incomplete", match=self.match)
            raise IncompleteFilterError(self.match)

        operand = self.condition.operand
        if isinstance(operand, list):
            operand = list(operand)

        rendered: dict[str, Any] = {
            "Match": self.match,
            self.condition.operation: operand,
        }
        if self.ignore_case is not None:
            rendered["IgnoreCase"] = self.ignore_case
        if self.statistic is not None:
            rendered["Statistic"] = self.statistic.value
        return rendered


class FilterBuilder:
    """
    Fluent builder for filters.

    Example:
        FilterBuilder("$.httpMethod").in_(["PUT", "POST"]).with_ignore_case(True).build()

    Choosing an operation replaces any previously chosen one.
    """

    def __init__(self, match: str):
        self._match = match
        self._condition: TextCondition | NumericCondition | PresenceCondition | None = None
        self._ignore_case: bool | None = None
        self._statistic: FilterStatistic | None = None

    def _text(self, operation: FilterOperation, values: list[str]) -> "FilterBuilder":
        if isinstance(values, (str, bytes)):
            raise TypeError(
                f"The {operation.value} filter operation takes a list of strings, "
                f"not a single {type(values).__name__}"
            )
        values = list(values)
        check_text_operand(operation.value, values)
        self._condition = TextCondition(operation=operation.value, operand=values)
        return self

    def _numeric(self, operation: FilterOperation, value: int | float) -> "FilterBuilder":
        self._condition = NumericCondition(operation=operation.value, operand=value)
        return self

    def in_(self, values: list[str]) -> "FilterBuilder":
        return self._text(FilterOperation.IN, values)

    def not_in(self, values: list[str]) -> "FilterBuilder":
        return self._text(FilterOperation.NOT_IN, values)

    def starts_with(self, values: list[str]) -> "FilterBuilder":
        return self._text(FilterOperation.STARTS_WITH, values)

    def greater_than(self, value: int | float) -> "FilterBuilder":
        return self._numeric(FilterOperation.GREATER_THAN, value)

    def less_than(self, value: int | float) -> "FilterBuilder":
        return self._numeric(FilterOperation.LESS_THAN, value)

    def equal_to(self, value: int | float) -> "FilterBuilder":
        return self._numeric(FilterOperation.EQUAL_TO, value)

    def not_equal_to(self, value: int | float) -> "FilterBuilder":
        return self._numeric(FilterOperation.NOT_EQUAL_TO, value)

    def is_present(self, present: bool) -> "FilterBuilder":
        self._condition = PresenceCondition(
            operation=FilterOperation.IS_PRESENT.value, operand=present
        )
        return self

    def with_ignore_case(self, ignore_case: bool) -> "FilterBuilder":
        self._ignore_case = ignore_case
        return self

    def with_statistic(self, statistic: FilterStatistic) -> "FilterBuilder":
        self._statistic = FilterStatistic(statistic)
        return self

    def build(self) -> Filter:
        return Filter(
            match=self._match,
            condition=self._condition,
            ignore_case=self._ignore_case,
            statistic=self._statistic,
        )

    def render(self) -> dict[str, Any]:
        return self.build().render()


def from_filter(item: Filter | FilterBuilder | Mapping[str, Any]) -> dict[str, Any]:
    """Render one filter, builder, or filter mapping (wire form or field names)."""
    if isinstance(item, FilterBuilder):
        item = item.build()
    elif isinstance(item, Mapping):
        item = Filter.model_validate(dict(item))
    return item.render()


def all_of(*filters: Filter | FilterBuilder | Mapping[str, Any]) -> list[dict[str, Any]]:
    """
    Render several filters, preserving order.

    The rule engine ANDs contribution filters together, hence the name.
    """
    return [from_filter(item) for item in filters]
