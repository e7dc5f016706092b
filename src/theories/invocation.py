"""Completed theory invocations: a test method paired with one complete assignment."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from theories.assignments import Assignments
from theories.potential import CouldNotGenerateValueError

_NO_ARGUMENT_STRINGS = "[Could not generate test input value strings]"


class TheoryInvocation:
    """One independently executed and reported test unit.

    Two invocations are equal when they wrap the same function and their
    assignments bind equal values.
    """

    def __init__(
        self, method: Callable[..., Any], assignments: Assignments, test_class: type
    ) -> None:
        self.method = method
        self.assignments = assignments
        self.test_class = test_class

    @property
    def method_name(self) -> str:
        return self.method.__name__

    @property
    def name(self) -> str:
        """Display name, ``method(arg1, arg2, ...)``."""
        try:
            strings = self.assignments.get_argument_strings(nulls_ok=True)
        except CouldNotGenerateValueError:
            return f"{self.method_name}({_NO_ARGUMENT_STRINGS})"
        return f"{self.method_name}({', '.join(strings)})"

    @property
    def qualified_name(self) -> str:
        return f"{self.test_class.__qualname__}.{self.name}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TheoryInvocation):
            return NotImplemented
        return self.method == other.method and self.assignments == other.assignments

    def __hash__(self) -> int:
        return hash((self.method, self.assignments))

    def __repr__(self) -> str:
        return f"TheoryInvocation({self.qualified_name})"

