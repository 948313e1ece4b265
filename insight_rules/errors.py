"""Exceptions raised while building insight rule bodies.

None of these subclass ValueError, so they pass through pydantic validators
untouched instead of being collected into a ``pydantic.ValidationError``.
"""


class InsightRuleError(Exception):
    """Base exception for rule body errors"""
    pass


class IncompleteFilterError(InsightRuleError):
    """Raised when a filter is rendered before an operation was chosen"""

    def __init__(self, match: str):
        self.match = match
        super().__init__(
            f"Filter on '{match}' has no operation; choose one before rendering"
        )


class OperandCardinalityError(InsightRuleError):
    """Raised when a text operation gets too few or too many operands"""

    def __init__(self, operation: str, length: int, minimum: int, maximum: int):
        self.operation = operation
        self.length = length
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"The {operation} filter operation allows {minimum} to {maximum} "
            f"inputs, but {length} was provided"
        )


class SchemaValidationError(InsightRuleError):
    """Raised when a rule body breaks a schema constraint"""
    pass
