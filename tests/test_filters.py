"""Tests for contribution filters and the filter builder."""
import math

import pytest
from pydantic import ValidationError

from insight_rules.errors import IncompleteFilterError, OperandCardinalityError
from insight_rules.rules.filters import (
    Filter,
    FilterBuilder,
    FilterOperation,
    FilterStatistic,
    NumericCondition,
    TextCondition,
    all_of,
    from_filter,
)


BASIC_TEXT_FILTER = {"Match": "$.httpMethod", "In": ["PUT"]}
BASIC_TEXT_FILTER_IGNORE_CASE = {"Match": "$.httpMethod", "In": ["PUT"], "IgnoreCase": True}
BASIC_NUMERICAL_FILTER = {"Match": "$.BytesReceived", "GreaterThan": 0}
BASIC_NUMERICAL_FILTER_AVERAGE = {
    "Match": "$.BytesReceived",
    "GreaterThan": 0,
    "Statistic": "Average",
}


class TestFilterBuilder:
    """Test building filters fluently"""

    def test_text_filter(self):
        """Test a plain text filter renders with no extra keys"""
        rendered = FilterBuilder("$.httpMethod").in_(["PUT"]).render()
        assert rendered == BASIC_TEXT_FILTER

    def test_text_filter_ignore_case(self):
        """Test ignore case is added when set"""
        rendered = FilterBuilder("$.httpMethod").in_(["PUT"]).with_ignore_case(True).render()
        assert rendered == BASIC_TEXT_FILTER_IGNORE_CASE

    def test_ignore_case_false_is_kept(self):
        """Test an explicit False is rendered, not dropped"""
        rendered = FilterBuilder("$.httpMethod").in_(["PUT"]).with_ignore_case(False).render()
        assert rendered["IgnoreCase"] is False

    def test_numerical_filter(self):
        """Test a numerical filter"""
        rendered = FilterBuilder("$.BytesReceived").greater_than(0).render()
        assert rendered == BASIC_NUMERICAL_FILTER

    def test_numerical_filter_statistic(self):
        """Test statistic is added when set"""
        rendered = (
            FilterBuilder("$.BytesReceived")
            .greater_than(0)
            .with_statistic(FilterStatistic.AVERAGE)
            .render()
        )
        assert rendered == BASIC_NUMERICAL_FILTER_AVERAGE

    def test_statistic_before_operation(self):
        """Test annotations can be set before the operation"""
        rendered = (
            FilterBuilder("$.latency")
            .with_statistic("Sum")
            .less_than(2.5)
            .render()
        )
        assert rendered == {"Match": "$.latency", "LessThan": 2.5, "Statistic": "Sum"}

    @pytest.mark.parametrize(
        "method, operation",
        [
            ("in_", "In"),
            ("not_in", "NotIn"),
            ("starts_with", "StartsWith"),
        ],
    )
    def test_text_operations(self, method, operation):
        """Test each text operation renders under its own key"""
        builder = getattr(FilterBuilder("$.path"), method)(["/api", "/admin"])
        assert builder.render() == {"Match": "$.path", operation: ["/api", "/admin"]}

    @pytest.mark.parametrize(
        "method, operation",
        [
            ("greater_than", "GreaterThan"),
            ("less_than", "LessThan"),
            ("equal_to", "EqualTo"),
            ("not_equal_to", "NotEqualTo"),
        ],
    )
    def test_numeric_operations(self, method, operation):
        """Test each numeric operation renders under its own key"""
        builder = getattr(FilterBuilder("$.status"), method)(-9001)
        assert builder.render() == {"Match": "$.status", operation: -9001}

    def test_is_present(self):
        """Test the presence operation takes a boolean"""
        rendered = FilterBuilder("$.errorCode").is_present(True).render()
        assert rendered == {"Match": "$.errorCode", "IsPresent": True}

    def test_last_operation_wins(self):
        """Test choosing a second operation replaces the first"""
        rendered = FilterBuilder("$.status").in_(["500"]).equal_to(500).render()
        assert rendered == {"Match": "$.status", "EqualTo": 500}

    def test_build_returns_filter(self):
        """Test build returns an immutable filter"""
        item = FilterBuilder("$.httpMethod").not_in(["GET"]).build()
        assert isinstance(item, Filter)
        assert item.operation == FilterOperation.NOT_IN
        with pytest.raises(ValidationError):
            item.match = "$.other"


class TestOperandCardinality:
    """Test limits on text operands"""

    @pytest.mark.parametrize("length", range(1, 11))
    def test_valid_lengths(self, length):
        """Test 1 to 10 operands are accepted"""
        values = [str(i) for i in range(length)]
        for method in ("in_", "not_in", "starts_with"):
            rendered = getattr(FilterBuilder("$.field"), method)(values).render()
            assert len(next(v for k, v in rendered.items() if k != "Match")) == length

    @pytest.mark.parametrize("method", ["in_", "not_in", "starts_with"])
    def test_empty_operand(self, method):
        """Test an empty operand list is rejected"""
        with pytest.raises(OperandCardinalityError) as exc_info:
            getattr(FilterBuilder("$.httpMethod"), method)([])

        assert exc_info.value.length == 0
        assert exc_info.value.minimum == 1
        assert "0 was provided" in str(exc_info.value)

    @pytest.mark.parametrize("method", ["in_", "not_in", "starts_with"])
    def test_too_many_operands(self, method):
        """Test more than ten operands are rejected"""
        values = [str(i) for i in range(1, 12)]
        with pytest.raises(OperandCardinalityError) as exc_info:
            getattr(FilterBuilder("$.httpMethod"), method)(values)

        assert exc_info.value.length == 11
        assert exc_info.value.maximum == 10
        assert "1 to 10" in str(exc_info.value)

    def test_direct_condition_is_checked(self):
        """Test the limit also applies to conditions built directly"""
        with pytest.raises(OperandCardinalityError):
            TextCondition(operation="In", operand=[])

    def test_wire_form_is_checked(self):
        """Test the limit also applies to filters loaded from wire form"""
        with pytest.raises(OperandCardinalityError):
            Filter.model_validate({"Match": "$.a", "StartsWith": [str(i) for i in range(12)]})

    @pytest.mark.parametrize("method", ["in_", "not_in", "starts_with"])
    @pytest.mark.parametrize("value", ["PUT", b"PUT"])
    def test_single_string_rejected(self, method, value):
        """Test a bare string is not split into one operand per character"""
        with pytest.raises(TypeError, match="list of strings"):
            getattr(FilterBuilder("$.httpMethod"), method)(value)

    def test_tuple_operand_accepted(self):
        """Test any sequence of strings is accepted"""
        assert FilterBuilder("$.httpMethod").in_(("PUT",)).render() == BASIC_TEXT_FILTER


class TestNumericOperand:
    """Test numeric operands are finite real numbers"""

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf])
    def test_non_finite_rejected(self, value):
        """Test NaN and infinity are rejected instead of rendering as null"""
        with pytest.raises(ValidationError):
            FilterBuilder("$.BytesReceived").greater_than(value)

    @pytest.mark.parametrize("value", [True, False])
    def test_bool_rejected(self, value):
        """Test a bool is not taken as 1 or 0"""
        with pytest.raises(ValidationError):
            FilterBuilder("$.BytesReceived").equal_to(value)

    def test_numeric_string_rejected(self):
        """Test a numeric string is not coerced"""
        with pytest.raises(ValidationError):
            NumericCondition(operation="LessThan", operand="5")

    @pytest.mark.parametrize("value", [0, -3, 2.5])
    def test_int_and_float_kept(self, value):
        """Test ints and finite floats render unchanged"""
        rendered = FilterBuilder("$.BytesReceived").less_than(value).render()
        assert rendered["LessThan"] == value
        assert type(rendered["LessThan"]) is type(value)

    def test_wire_form_nan_rejected(self):
        """Test NaN is also rejected from wire form"""
        with pytest.raises(ValidationError):
            Filter.model_validate({"Match": "$.a", "GreaterThan": float("nan")})


class TestFilterRender:
    """Test rendering filters"""

    def test_render_without_operation(self):
        """Test a filter without an operation cannot be rendered"""
        with pytest.raises(IncompleteFilterError) as exc_info:
            FilterBuilder("$.httpMethod").render()
        assert exc_info.value.match == "$.httpMethod"

    def test_filter_without_condition(self):
        """Test a directly built filter with no condition cannot be rendered"""
        item = Filter(match="$.httpMethod", ignore_case=True)
        assert item.operation is None
        with pytest.raises(IncompleteFilterError):
            item.render()

    def test_direct_construction(self):
        """Test building a filter from its parts"""
        item = Filter(
            match="$.BytesReceived",
            condition=NumericCondition(operation="GreaterThan", operand=0),
            statistic=FilterStatistic.AVERAGE,
        )
        assert item.render() == BASIC_NUMERICAL_FILTER_AVERAGE

    def test_condition_from_mapping(self):
        """Test the condition variant is picked by its operation"""
        item = Filter.model_validate(
            {"match": "$.httpMethod", "condition": {"operation": "In", "operand": ["PUT"]}}
        )
        assert isinstance(item.condition, TextCondition)
        assert item.render() == BASIC_TEXT_FILTER

    def test_mismatched_operand_rejected(self):
        """Test a numeric operation cannot take a string list"""
        with pytest.raises(ValidationError):
            Filter.model_validate(
                {"match": "$.a", "condition": {"operation": "GreaterThan", "operand": ["x"]}}
            )

    def test_unknown_operation_rejected(self):
        """Test an unknown operation is rejected"""
        with pytest.raises(ValidationError):
            Filter.model_validate(
                {"match": "$.a", "condition": {"operation": "Contains", "operand": ["x"]}}
            )

    def test_wire_form_round_trip(self):
        """Test a rendered filter can be loaded back"""
        item = Filter.model_validate(BASIC_TEXT_FILTER_IGNORE_CASE)
        assert item.match == "$.httpMethod"
        assert item.ignore_case is True
        assert item.render() == BASIC_TEXT_FILTER_IGNORE_CASE

    def test_wire_form_with_two_operations(self):
        """Test a wire-form filter with two operations is rejected"""
        with pytest.raises(ValidationError):
            Filter.model_validate({"Match": "$.a", "In": ["x"], "GreaterThan": 1})

    def test_render_does_not_share_operand(self):
        """Test mutating a rendered operand leaves the filter untouched"""
        item = FilterBuilder("$.httpMethod").in_(["PUT"]).build()
        item.render()["In"].append("POST")
        assert item.render() == BASIC_TEXT_FILTER


def test_from_filter_accepts_builder():
    """Test from_filter renders builders and filters alike"""
    builder = FilterBuilder("$.httpMethod").in_(["PUT"])
    assert from_filter(builder) == BASIC_TEXT_FILTER
    assert from_filter(builder.build()) == BASIC_TEXT_FILTER


def test_all_of_preserves_order():
    """Test all_of renders every filter in order"""
    rendered = all_of(
        FilterBuilder("$.httpMethod").in_(["PUT"]).with_ignore_case(True),
        FilterBuilder("$.BytesReceived").greater_than(0).with_statistic(FilterStatistic.AVERAGE).build(),
    )
    assert rendered == [BASIC_TEXT_FILTER_IGNORE_CASE, BASIC_NUMERICAL_FILTER_AVERAGE]


def test_all_of_empty():
    """Test all_of with no filters"""
    assert all_of() == []


def test_from_filter_accepts_wire_form_mapping():
    """Test from_filter renders a filter given in wire form"""
    assert from_filter({"Match": "$.httpMethod", "In": ["PUT"]}) == BASIC_TEXT_FILTER
    assert from_filter(BASIC_TEXT_FILTER_IGNORE_CASE) == BASIC_TEXT_FILTER_IGNORE_CASE


def test_from_filter_accepts_field_mapping():
    """Test from_filter renders a filter given by field names"""
    item = {"match": "$.httpMethod", "condition": {"operation": "In", "operand": ["PUT"]}}
    assert from_filter(item) == BASIC_TEXT_FILTER


def test_from_filter_mapping_is_validated():
    """Test a mapping goes through the same checks as a built filter"""
    with pytest.raises(OperandCardinalityError):
        from_filter({"Match": "$.httpMethod", "In": []})
    with pytest.raises(IncompleteFilterError):
        from_filter({"Match": "$.httpMethod"})


def test_all_of_mixed_inputs():
    """Test all_of accepts mappings alongside builders and filters"""
    rendered = all_of(
        {"Match": "$.httpMethod", "In": ["PUT"], "IgnoreCase": True},
        FilterBuilder("$.BytesReceived").greater_than(0).with_statistic(FilterStatistic.AVERAGE),
    )
    assert rendered == [BASIC_TEXT_FILTER_IGNORE_CASE, BASIC_NUMERICAL_FILTER_AVERAGE]
