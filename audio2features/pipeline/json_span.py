"""Locating a JSON object embedded in free model text."""

from abc import ABC, abstractmethod


class JSONSpanLocator(ABC):
    """Finds the candidate JSON object substring inside a model response."""

    @abstractmethod
    def locate(self, text: str) -> str | None:
        """Return the candidate substring, or None when there is none."""
        ...


class GreedyBraceLocator(JSONSpanLocator):
    """
    First ``{`` through last ``}``.

    Not a balanced-brace parse: two sibling objects in one response are returned
    as a single span, and stray braces in surrounding prose widen the slice.
    Such slices usually fail to decode and land on the parse-error path.
    """

    def locate(self, text: str) -> str | None:
        start = text.find("{")
        if start == -1:
            return None
        end = text.rfind("}")
        if end < start:
            return None
        return text[start:end + 1]
