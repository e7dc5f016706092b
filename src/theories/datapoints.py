"""Declaration surface for test authors: theories and data points.

Example::

    class UserTheories:
        GOOD_USERNAME = DataPoint("optimus")
        USERNAME_WITH_SLASH = DataPoint("optimus/prime")

        @theory
        def test_filename_includes_username(self, username: str) -> None:
            assume("/" not in username)
            assert username in User(username).config_file_name()

The runner calls ``test_filename_includes_username`` once per compatible
data point. Invocations whose assumptions fail are skipped; invocations
whose assertions fail are reported with the offending arguments.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, get_type_hints, overload

from pydantic import BaseModel, ConfigDict

_THEORY_ATTR = "__theory__"


# ---------------------------------------------------------------------------
# @theory
# ---------------------------------------------------------------------------


class TheoryMarker(BaseModel):
    """Options attached to a function by ``@theory``.

    Attributes:
        nulls_accepted: Whether ``None`` arguments are passed through instead
            of skipping the invocation.
    """

    model_config = ConfigDict(frozen=True)

    nulls_accepted: bool = False


@overload
def theory(func: Callable[..., Any], /) -> Callable[..., Any]: ...


@overload
def theory(
    *, nulls_accepted: bool = False
) -> Callable[[Callable[..., Any]], Callable[..., Any]]: ...


def theory(
    func: Callable[..., Any] | None = None, /, *, nulls_accepted: bool = False
) -> Any:
    """Mark a test method as a theory.

    Usable bare (``@theory``) or with options
    (``@theory(nulls_accepted=True)``).
    """
    marker = TheoryMarker(nulls_accepted=nulls_accepted)

    def decorate(f: Callable[..., Any]) -> Callable[..., Any]:
        setattr(f, _THEORY_ATTR, marker)
        return f

    if func is not None:
        return decorate(func)
    return decorate


def theory_marker(func: Any) -> TheoryMarker | None:
    """Return the ``TheoryMarker`` attached to *func*, if any."""
    marker = getattr(func, _THEORY_ATTR, None)
    return marker if isinstance(marker, TheoryMarker) else None


def is_theory(func: Any) -> bool:
    return theory_marker(func) is not None


def nulls_ok(func: Any) -> bool:
    """Whether *func* is a theory that accepts ``None`` arguments."""
    marker = theory_marker(func)
    return marker is not None and marker.nulls_accepted


# ---------------------------------------------------------------------------
# Data point markers
# ---------------------------------------------------------------------------


class DataPoint:
    """A single candidate value declared as a class attribute.

    Args:
        value: The candidate.
        type: Declared type. Defaults to ``type(value)``; a ``None`` value
            without a declared type is compatible with every parameter.
    """

    def __init__(self, value: Any, type: Any = None) -> None:  # noqa: A002
        self.value = value
        self.declared_type = type

    def __repr__(self) -> str:
        return f"DataPoint({self.value!r})"


class DataPoints:
    """A finite collection of candidate values declared as a class attribute.

    Each element is matched against a parameter individually.
    """

    def __init__(self, values: Iterable[Any]) -> None:
        self.values = tuple(values)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.values)

    def __repr__(self) -> str:
        return f"DataPoints({self.values!r})"


class DataPointFunction:
    """A zero-argument function in the class body producing candidates.

    Attributes:
        func: The wrapped function.
        many: True for ``@datapoints`` (an iterable of candidates), False for
            ``@datapoint`` (one lazily computed candidate).
    """

    def __init__(self, func: Callable[..., Any], *, many: bool) -> None:
        self.func = func
        self.many = many

    def return_type(self) -> Any:
        """The function's return annotation, or None when absent or unresolvable."""
        try:
            return get_type_hints(self.func).get("return")
        except NameError:
            return None

    def __call__(self) -> Any:
        return self.func()

    def __repr__(self) -> str:
        kind = "datapoints" if self.many else "datapoint"
        return f"@{kind} {self.func.__qualname__}"


def datapoint(func: Callable[..., Any]) -> DataPointFunction:
    """Declare a zero-argument function whose return value is one candidate."""
    return DataPointFunction(_unwrap_static(func), many=False)


def datapoints(func: Callable[..., Any]) -> DataPointFunction:
    """Declare a zero-argument function returning an iterable of candidates."""
    return DataPointFunction(_unwrap_static(func), many=True)


def _unwrap_static(func: Any) -> Callable[..., Any]:
    if isinstance(func, staticmethod):
        return func.__func__
    return func


DataMember = DataPoint | DataPoints | DataPointFunction


def data_members(test_class: type) -> list[tuple[str, DataMember]]:
    """Ordered ``(name, marker)`` pairs declared on *test_class* and its bases.

    Declaration order within a class body; subclasses before base classes;
    an overridden name appears once, with the most derived marker.
    """
    seen: set[str] = set()
    members: list[tuple[str, DataMember]] = []
    for klass in test_class.__mro__:
        if klass is object:
            continue
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            if isinstance(attr, DataPoint | DataPoints | DataPointFunction):
                members.append((name, attr))
    return members
