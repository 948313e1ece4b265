"""Rule body builder for version 1 CloudWatch Logs contributor insights rules.

A description goes through three steps before it is handed to the resource:

1. ``apply_defaults`` fills in the schema, log format, aggregation and filters
2. ``validate_rule_body`` checks the schema and the contribution limits
3. ``render_rule_body`` maps every field to its wire name

``build`` runs all three and serializes the result with orjson.
"""
from collections.abc import Mapping
from os import PathLike
from pathlib import Path
from typing import Any

import orjson

from ..config import get_settings
from ..errors import SchemaValidationError
from ..logging import get_logger
from .base import RuleBody
from .filters import Filter
from .models import (
    Aggregation,
    CloudWatchLogsRuleDescription,
    LogFormat,
    RuleSchema,
)

log = get_logger()

CLOUDWATCH_LOGS_V1_SCHEMA = RuleSchema(name="CloudWatchLogRule", version=1)
MIN_CONTRIBUTION_KEYS = 0
MAX_CONTRIBUTION_KEYS = 4
MAX_CONTRIBUTION_FILTERS = 4

RuleDescriptionInput = CloudWatchLogsRuleDescription | Mapping[str, Any]


def _as_description(description: RuleDescriptionInput) -> CloudWatchLogsRuleDescription:
    if isinstance(description, CloudWatchLogsRuleDescription):
        return description
    return CloudWatchLogsRuleDescription.model_validate(description)


def _read_json(path: str | PathLike, encoding: str | None) -> Any:
    """Read and parse a JSON file. Read, decode and parse errors propagate."""
    encoding = encoding or get_settings().RULE_BODY_ENCODING
    text = Path(path).read_bytes().decode(encoding)
    log.info("rule_body.file_read", path=str(path), encoding=encoding)
    return orjson.loads(text)


def apply_defaults(description: RuleDescriptionInput) -> CloudWatchLogsRuleDescription:
    """
    Fill in every field the caller left out.

    The input is not modified; a new description is returned.

    - log_format: CLF if fields are given, otherwise JSON
    - rule_schema: the CloudWatchLogRule version 1 schema
    - aggregate_on: Sum if contribution.value_of is given, otherwise Count
    - contribution.filters: an empty list, since the resource requires the key
    """
    description = _as_description(description)
    updates: dict[str, Any] = {}

    if description.log_format is None:
        updates["log_format"] = LogFormat.CLF if description.fields else LogFormat.JSON

    if description.rule_schema is None:
        updates["rule_schema"] = CLOUDWATCH_LOGS_V1_SCHEMA

    if description.aggregate_on is None:
        has_value = description.contribution.value_of is not None
        updates["aggregate_on"] = Aggregation.SUM if has_value else Aggregation.COUNT

    if description.contribution.filters is None:
        updates["contribution"] = description.contribution.model_copy(update={"filters": []})

    if not updates:
        return description

    log.debug("rule_body.defaults_applied", fields=sorted(updates))
    return description.model_copy(update=updates)


def validate_rule_body(description: CloudWatchLogsRuleDescription) -> None:
    """
    Check a description against the version 1 CloudWatch Logs schema.

    Raises:
        SchemaValidationError: On the first violated constraint, checked in
            the order schema, contribution keys, contribution filters
    """
    schema = description.rule_schema
    if schema is not None and (
        schema.name != CLOUDWATCH_LOGS_V1_SCHEMA.name
        or schema.version != CLOUDWATCH_LOGS_V1_SCHEMA.version
    ):
        log.warning(
            "rule_body.validation_failed",
            reason="schema",
            schema_name=schema.name,
            schema_version=schema.version,
        )
        raise SchemaValidationError(
            "A version 1 CloudWatch Logs rule body can only have the schema "
            f"{CLOUDWATCH_LOGS_V1_SCHEMA.name!r} version {CLOUDWATCH_LOGS_V1_SCHEMA.version}, "
            f"but {schema.name!r} version {schema.version} was given"
        )

    key_count = len(description.contribution.keys)
    if not MIN_CONTRIBUTION_KEYS <= key_count <= MAX_CONTRIBUTION_KEYS:
        log.warning(
            "rule_body.validation_failed",
            reason="contribution_keys",
            count=key_count,
            maximum=MAX_CONTRIBUTION_KEYS,
        )
        raise SchemaValidationError(
            f"A version 1 CloudWatch Logs rule body can have between {MIN_CONTRIBUTION_KEYS} "
            f"and {MAX_CONTRIBUTION_KEYS} contribution keys, but {key_count} were given"
        )

    filters = description.contribution.filters or []
    if len(filters) > MAX_CONTRIBUTION_FILTERS:
        log.warning(
            "rule_body.validation_failed",
            reason="contribution_filters",
            count=len(filters),
            maximum=MAX_CONTRIBUTION_FILTERS,
        )
        raise SchemaValidationError(
            f"A version 1 CloudWatch Logs rule body can have up to {MAX_CONTRIBUTION_FILTERS} "
            f"contribution filters, but {len(filters)} were given"
        )


def _render_filters(filters: list[Filter] | None) -> list[dict[str, Any]]:
    return [item.render() for item in filters or []]


def render_rule_body(description: CloudWatchLogsRuleDescription) -> dict[str, Any]:
    """
    Map a description to the wire format.

    Values that were never provided are left out rather than rendered as null.
    Filters are always present, as an empty list if there are none.
    """
    rendered: dict[str, Any] = {}

    if description.rule_schema is not None:
        rendered["Schema"] = {
            "Name": description.rule_schema.name,
            "Version": description.rule_schema.version,
        }

    rendered["LogGroupNames"] = list(description.log_group_names)

    if description.log_format is not None:
        rendered["LogFormat"] = description.log_format.value

    if description.fields is not None:
        rendered["Fields"] = dict(description.fields)

    contribution = description.contribution
    rendered_contribution: dict[str, Any] = {"Keys": list(contribution.keys)}
    if contribution.value_of is not None:
        rendered_contribution["ValueOf"] = contribution.value_of
    rendered_contribution["Filters"] = _render_filters(contribution.filters)
    rendered["Contribution"] = rendered_contribution

    if description.aggregate_on is not None:
        rendered["AggregateOn"] = description.aggregate_on.value

    return rendered


def build(description: RuleDescriptionInput) -> str:
    """
    Build a version 1 CloudWatch Logs rule body.

    Args:
        description: A CloudWatchLogsRuleDescription, or a mapping in the
            same shape (snake_case or camelCase keys)

    Returns:
        The rule body as a JSON string

    Raises:
        SchemaValidationError: If the description breaks a schema constraint
        IncompleteFilterError: If a contribution filter has no operation
        pydantic.ValidationError: If a mapping does not have the expected shape
    """
    return CloudWatchLogsV1RuleBody.from_rule_body(description).render()


def build_from_file(path: str | PathLike, encoding: str | None = None) -> str:
    """
    Build a version 1 CloudWatch Logs rule body from a JSON file.

    The file holds the description in its pre-render shape. Errors reading,
    decoding or parsing the file propagate unchanged.
    """
    return CloudWatchLogsV1RuleBody.from_file(path, encoding).render()


class CloudWatchLogsV1RuleBody(RuleBody):
    """A defaulted and validated version 1 CloudWatch Logs rule body."""

    def __init__(self, description: CloudWatchLogsRuleDescription):
        self.description = apply_defaults(description)
        validate_rule_body(self.description)

    @classmethod
    def from_rule_body(cls, description: RuleDescriptionInput) -> "CloudWatchLogsV1RuleBody":
        return cls(_as_description(description))

    @classmethod
    def from_file(
        cls,
        path: str | PathLike,
        encoding: str | None = None,
    ) -> "CloudWatchLogsV1RuleBody":
        return cls.from_rule_body(_read_json(path, encoding))

    def render(self) -> str:
        rendered = render_rule_body(self.description)
        log.debug(
            "rule_body.built",
            log_groups=len(self.description.log_group_names),
            keys=len(self.description.contribution.keys),
            filters=len(rendered["Contribution"]["Filters"]),
            aggregate_on=rendered.get("AggregateOn"),
        )
        return orjson.dumps(rendered).decode()


class CustomRuleBody(RuleBody):
    """
    A rule body passed through without defaults or validation.

    For schemas this package does not model. Strings are used verbatim,
    other rule bodies render as themselves, and anything else is
    serialized as JSON unchanged.
    """

    def __init__(self, body: Any):
        self.body = body

    @classmethod
    def from_rule_body(cls, body: Any) -> "CustomRuleBody":
        return cls(body)

    @classmethod
    def from_file(cls, path: str | PathLike, encoding: str | None = None) -> "CustomRuleBody":
        encoding = encoding or get_settings().RULE_BODY_ENCODING
        text = Path(path).read_bytes().decode(encoding)
        log.info("rule_body.file_read", path=str(path), encoding=encoding, custom=True)
        return cls(text)

    def render(self) -> str:
        if isinstance(self.body, str):
            return self.body
        if isinstance(self.body, RuleBody):
            return self.body.render()
        return orjson.dumps(self.body).decode()
