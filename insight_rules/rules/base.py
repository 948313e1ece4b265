"""Base interface for rule bodies."""
from abc import ABC, abstractmethod


class RuleBody(ABC):
    """A rule body ready to be handed to an insight rule resource."""

    @abstractmethod
    def render(self) -> str:
        """
        Serialize the rule body.

        Returns:
            The rule body as a JSON string
        """
        pass
