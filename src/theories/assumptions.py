"""Assumption helpers.

An assumption that does not hold means "this input combination is out of
scope for this test". The runner classifies it as a skip, never as a
failure, and never decorates it with argument context.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from theories.potential import describe_exception


class AssumptionViolatedError(Exception):
    """Raised when a precondition of a test does not hold."""


def assume(condition: bool, message: str = "assumption failed") -> None:
    """Skip the current invocation unless *condition* is truthy.

    Raises:
        AssumptionViolatedError: If *condition* is falsy.
    """
    if not condition:
        raise AssumptionViolatedError(message)


def assume_not_none(*values: Any) -> None:
    """Skip the current invocation if any of *values* is ``None``.

    Raises:
        AssumptionViolatedError: Naming the position of the first ``None``.
    """
    for position, value in enumerate(values):
        if value is None:
            msg = f"got None at position {position}, expected every value to be non-None"
            raise AssumptionViolatedError(msg)


def assume_no_exception(
    func: Callable[[], Any], *exc_types: type[BaseException]
) -> Any:
    """Call *func* and skip the invocation if it raises one of *exc_types*.

    With no *exc_types*, any ``Exception`` counts.

    Returns:
        Whatever *func* returns.

    Raises:
        AssumptionViolatedError: Chained to the exception *func* raised.
    """
    caught = exc_types or (Exception,)
    try:
        return func()
    except caught as exc:
        msg = f"assumption failed: {describe_exception(exc)}"
        raise AssumptionViolatedError(msg) from exc
