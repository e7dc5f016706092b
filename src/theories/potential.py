"""Candidate sources: one potential value for one parameter.

A ``PotentialAssignment`` wraps either a fixed value or a thunk that
computes it. Thunks run only when the candidate is bound, and every
failure surfaces as ``CouldNotGenerateValueError`` so the expansion engine
can drop that branch without disturbing its siblings.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

_REPR_FAILED = "[repr failed]"
_STR_FAILED = "[str failed]"


class CouldNotGenerateValueError(Exception):
    """A candidate (or a candidate list) could not be produced."""


def safe_repr(value: Any) -> str:
    """Return ``repr(value)``, or a fixed placeholder if ``repr`` raises."""
    try:
        return repr(value)
    except Exception:
        return _REPR_FAILED


def safe_str(value: Any) -> str:
    """Return ``str(value)``, or a fixed placeholder if ``str`` raises."""
    try:
        return str(value)
    except Exception:
        return _STR_FAILED


def describe_exception(exc: BaseException) -> str:
    """Render *exc* as ``Type: message``. Never raises."""
    return f"{type(exc).__name__}: {safe_str(exc)}"


class PotentialAssignment:
    """A named, lazily evaluated candidate value.

    Use the ``for_value`` and ``lazy`` constructors rather than building
    instances directly.
    """

    __slots__ = ("_declared_type", "_name", "_thunk")

    def __init__(
        self,
        name: str,
        thunk: Callable[[], Any],
        declared_type: Any = None,
    ) -> None:
        self._name = name
        self._thunk = thunk
        self._declared_type = declared_type

    @classmethod
    def for_value(
        cls, name: str, value: Any, declared_type: Any = None
    ) -> PotentialAssignment:
        """Wrap an already-known value.

        *declared_type* defaults to ``type(value)``, or ``None`` for a ``None`` value.
        """
        if declared_type is None and value is not None:
            declared_type = type(value)
        return cls(name, lambda: value, declared_type)

    @classmethod
    def lazy(
        cls, name: str, thunk: Callable[[], Any], declared_type: Any = None
    ) -> PotentialAssignment:
        """Wrap a computation that runs each time the candidate is bound."""
        return cls(name, thunk, declared_type)

    @property
    def name(self) -> str:
        return self._name

    @property
    def declared_type(self) -> Any:
        """Type the value is declared to have, or ``None`` when unknown."""
        return self._declared_type

    def value(self) -> Any:
        """Produce the candidate value.

        Raises:
            CouldNotGenerateValueError: If the underlying computation fails.
        """
        try:
            return self._thunk()
        except CouldNotGenerateValueError:
            raise
        except Exception as exc:
            msg = f"could not generate value for {self._name}: {describe_exception(exc)}"
            raise CouldNotGenerateValueError(msg) from exc

    def describe(self, value: Any) -> str:
        """Render *value* as ``<repr> <from NAME>`` for diagnostics. Never raises.

        The caller passes the already-materialized value so lazy candidates
        are not recomputed just to be printed.
        """
        return f"{safe_repr(value)} <from {self._name}>"

    def __repr__(self) -> str:
        return f"PotentialAssignment({self._name!r})"
