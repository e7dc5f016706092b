"""Parameter introspection for theory methods and test-class constructors.

Builds immutable ``ParameterSignature`` models from Python callables and
decides whether a candidate value (or a candidate's declared type) is
compatible with a parameter. ``typing.Annotated`` extras on a parameter
are kept as signature metadata; ``TestedOn`` and ``SuppliedBy`` are the
markers the suppliers look for there.
"""

from __future__ import annotations

from collections.abc import Callable
import inspect
import types
from typing import Annotated, Any, Literal, TypeVar, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

_ANY_ANNOTATIONS: tuple[Any, ...] = (Any, inspect.Parameter.empty, object)
_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)
_NONE_ANNOTATIONS: tuple[Any, ...] = (None, type(None))
_SKIPPED_FIRST_PARAMETERS = frozenset({"self", "cls"})


# ---------------------------------------------------------------------------
# Annotated metadata markers
# ---------------------------------------------------------------------------


class TestedOn:
    """Inline candidates for a single parameter.

    Example::

        @theory
        def test_abs(self, x: Annotated[int, TestedOn(-1, 0, 1)]) -> None: ...
    """

    __test__ = False

    def __init__(self, *values: Any) -> None:
        self.values = values

    def __repr__(self) -> str:
        return f"TestedOn{self.values!r}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TestedOn):
            return NotImplemented
        return self.values == other.values

    def __hash__(self) -> int:
        # Values may be unhashable.
        return hash((TestedOn, len(self.values)))


class SuppliedBy:
    """Route a parameter's candidates through a custom ``ParameterSupplier``.

    *supplier* is a class constructed with no arguments or with the test
    class; see ``theories.suppliers``.
    """

    def __init__(self, supplier: type) -> None:
        self.supplier = supplier

    def __repr__(self) -> str:
        return f"SuppliedBy({self.supplier.__qualname__})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SuppliedBy):
            return NotImplemented
        return self.supplier is other.supplier

    def __hash__(self) -> int:
        return hash((SuppliedBy, id(self.supplier)))


# ---------------------------------------------------------------------------
# ParameterSignature
# ---------------------------------------------------------------------------


class ParameterSignature(BaseModel):
    """One formal parameter of a theory or of the test-class constructor.

    Attributes:
        index: Position of the parameter in its callable, ``self`` excluded.
        name: Parameter name.
        annotation: Declared type with any ``Annotated`` wrapper removed.
        metadata: Extras attached through ``Annotated``.
        nulls_accepted: Whether the enclosing theory accepts ``None`` values.
    """

    model_config = ConfigDict(frozen=True)

    index: int
    name: str
    annotation: Any = Field(default=Any)
    metadata: tuple[Any, ...] = ()
    nulls_accepted: bool = False

    def can_accept_value(self, value: Any) -> bool:
        """Whether *value* is a compatible candidate for this parameter."""
        return _accepts_value(self.annotation, value)

    def can_accept_type(self, declared: Any) -> bool:
        """Whether values declared as *declared* are compatible candidates."""
        return _accepts_type(self.annotation, declared)

    def find_metadata(self, kind: type) -> Any:
        """Return the first ``Annotated`` extra that is an instance of *kind*, or None."""
        for item in self.metadata:
            if isinstance(item, kind):
                return item
        return None


def _accepts_value(annotation: Any, value: Any) -> bool:
    if annotation in _ANY_ANNOTATIONS:
        return True
    origin = get_origin(annotation)
    if origin in _UNION_ORIGINS:
        return any(_accepts_value(arg, value) for arg in get_args(annotation))
    if annotation in _NONE_ANNOTATIONS:
        return value is None
    if value is None:
        # A null of the declared type; the runner's null guard decides.
        return True
    if origin is Literal:
        return value in get_args(annotation)
    target = origin if origin is not None else annotation
    if not isinstance(target, type):
        return False
    if target is int and isinstance(value, bool):
        return False
    return isinstance(value, target)


def _accepts_type(annotation: Any, declared: Any) -> bool:
    if annotation in _ANY_ANNOTATIONS:
        return True
    declared_origin = get_origin(declared)
    if declared_origin in _UNION_ORIGINS:
        return all(_accepts_type(annotation, arg) for arg in get_args(declared))
    origin = get_origin(annotation)
    if origin in _UNION_ORIGINS:
        return any(_accepts_type(arg, declared) for arg in get_args(annotation))
    if annotation in _NONE_ANNOTATIONS:
        return declared in _NONE_ANNOTATIONS
    if declared_origin is not None:
        declared = declared_origin
    target = origin if origin is not None else annotation
    if not isinstance(target, type) or not isinstance(declared, type):
        return False
    if target is int and declared is bool:
        return False
    return issubclass(declared, target)


# ---------------------------------------------------------------------------
# Signature extraction
# ---------------------------------------------------------------------------


def _split_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(annotation) is Annotated:
        base, *extras = get_args(annotation)
        return base, tuple(extras)
    return annotation, ()


def _bound_parameters(func: Callable[..., Any]) -> list[inspect.Parameter]:
    params = list(inspect.signature(func).parameters.values())
    if params and params[0].name in _SKIPPED_FIRST_PARAMETERS:
        params = params[1:]
    return params


def signatures_of(
    func: Callable[..., Any], *, nulls_accepted: bool = False
) -> list[ParameterSignature]:
    """Build the ordered signatures of *func*'s parameters.

    A leading ``self`` or ``cls`` parameter is skipped.

    Raises:
        NameError: If a string annotation cannot be resolved.
    """
    hints = get_type_hints(func, include_extras=True)
    signatures: list[ParameterSignature] = []
    for index, param in enumerate(_bound_parameters(func)):
        annotation, metadata = _split_annotated(hints.get(param.name, Any))
        signatures.append(
            ParameterSignature(
                index=index,
                name=param.name,
                annotation=annotation,
                metadata=metadata,
                nulls_accepted=nulls_accepted,
            )
        )
    return signatures


def has_custom_constructor(test_class: type) -> bool:
    """Whether *test_class* defines (or inherits) an ``__init__`` of its own."""
    return test_class.__init__ is not object.__init__


def constructor_signatures(
    test_class: type, *, nulls_accepted: bool = False
) -> list[ParameterSignature]:
    """Signatures of the test-class constructor, empty for ``object.__init__``."""
    if not has_custom_constructor(test_class):
        return []
    return signatures_of(test_class.__init__, nulls_accepted=nulls_accepted)


def is_type_variable(annotation: Any) -> bool:
    """Whether *annotation* is a bare ``TypeVar``."""
    return isinstance(annotation, TypeVar)


def variadic_parameters(func: Callable[..., Any]) -> list[str]:
    """Names of ``*args``/``**kwargs`` parameters declared by *func*."""
    return [
        p.name
        for p in _bound_parameters(func)
        if p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def required_parameters(func: Callable[..., Any]) -> list[str]:
    """Names of parameters of *func* (or of a class's constructor) without defaults."""
    return [
        p.name
        for p in inspect.signature(func).parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
