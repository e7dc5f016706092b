"""Partial assignments of candidate values to parameters.

An ``Assignments`` value binds a prefix of a theory's parameters, the
constructor parameters first and then the method parameters, strictly
left to right. It is immutable: ``assign_next`` returns a new value that
shares the already-bound prefix, so sibling branches of the expansion
search never observe each other's bindings.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, NamedTuple, Protocol

from theories.datapoints import theory_marker
from theories.potential import (
    CouldNotGenerateValueError,
    PotentialAssignment,
    describe_exception,
)
from theories.signatures import ParameterSignature, constructor_signatures, signatures_of
from theories.suppliers import ClassCandidateProvider


class CandidateProvider(Protocol):
    """Lists the candidate sources for one parameter given earlier bindings."""

    def __call__(  # noqa: D102
        self, signature: ParameterSignature, assignments: Assignments
    ) -> list[PotentialAssignment]: ...


class Binding(NamedTuple):
    """One bound parameter: its signature, the chosen source and the value."""

    signature: ParameterSignature
    source: PotentialAssignment
    value: Any


class Assignments:
    """Immutable partial binding of values to constructor and method parameters."""

    __slots__ = ("_bindings", "_constructor_signatures", "_method_signatures", "_provider")

    def __init__(
        self,
        method_signatures: Sequence[ParameterSignature],
        provider: CandidateProvider,
        *,
        constructor_signatures: Sequence[ParameterSignature] = (),
        bindings: tuple[Binding, ...] = (),
    ) -> None:
        self._method_signatures = tuple(method_signatures)
        self._constructor_signatures = tuple(constructor_signatures)
        self._provider = provider
        self._bindings = bindings

    @classmethod
    def all_unassigned(
        cls, method: Callable[..., Any], test_class: type
    ) -> Assignments:
        """Start state for *method*: nothing bound yet.

        Constructor signatures come from *test_class*'s ``__init__`` and
        share the method's null policy.
        """
        marker = theory_marker(method)
        nulls_accepted = marker is not None and marker.nulls_accepted
        return cls(
            signatures_of(method, nulls_accepted=nulls_accepted),
            ClassCandidateProvider(test_class),
            constructor_signatures=constructor_signatures(
                test_class, nulls_accepted=nulls_accepted
            ),
        )

    # -- structure ---------------------------------------------------------

    @property
    def signatures(self) -> tuple[ParameterSignature, ...]:
        """Every signature, constructor parameters first."""
        return self._constructor_signatures + self._method_signatures

    @property
    def bindings(self) -> tuple[Binding, ...]:
        return self._bindings

    @property
    def constructor_parameter_count(self) -> int:
        return len(self._constructor_signatures)

    def is_complete(self) -> bool:
        return len(self._bindings) == len(self.signatures)

    def unassigned(self) -> tuple[ParameterSignature, ...]:
        """Signatures not bound yet, in order."""
        return self.signatures[len(self._bindings) :]

    def next_unassigned(self) -> ParameterSignature:
        """The signature right after the bound prefix.

        Raises:
            ValueError: If every parameter is already bound.
        """
        if self.is_complete():
            msg = "all parameters are already assigned"
            raise ValueError(msg)
        return self.signatures[len(self._bindings)]

    # -- expansion ---------------------------------------------------------

    def potentials_for_next(self) -> list[PotentialAssignment]:
        """Candidate sources for ``next_unassigned()`` given the current bindings.

        Raises:
            CouldNotGenerateValueError: If the provider cannot list candidates.
        """
        signature = self.next_unassigned()
        try:
            return list(self._provider(signature, self))
        except CouldNotGenerateValueError:
            raise
        except Exception as exc:
            msg = (
                f"could not list candidates for parameter {signature.name}: "
                f"{describe_exception(exc)}"
            )
            raise CouldNotGenerateValueError(msg) from exc

    def assign_next(self, source: PotentialAssignment) -> Assignments:
        """Return a new ``Assignments`` with the next parameter bound to *source*'s value.

        Raises:
            CouldNotGenerateValueError: If *source* cannot produce its value.
        """
        signature = self.next_unassigned()
        binding = Binding(signature, source, source.value())
        return Assignments(
            self._method_signatures,
            self._provider,
            constructor_signatures=self._constructor_signatures,
            bindings=(*self._bindings, binding),
        )

    # -- values ------------------------------------------------------------

    def bound_values(self) -> tuple[Any, ...]:
        return tuple(b.value for b in self._bindings)

    def value_of(self, name: str) -> Any:
        """Value bound to the parameter called *name*.

        Method parameters shadow constructor parameters of the same name.

        Raises:
            KeyError: If no bound parameter has that name.
        """
        for binding in reversed(self._bindings):
            if binding.signature.name == name:
                return binding.value
        raise KeyError(name)

    def _require_complete(self) -> None:
        if not self.is_complete():
            msg = (
                f"assignment is incomplete: {len(self._bindings)} of "
                f"{len(self.signatures)} parameters bound"
            )
            raise ValueError(msg)

    def get_constructor_arguments(self) -> tuple[Any, ...]:
        self._require_complete()
        return self.bound_values()[: self.constructor_parameter_count]

    def get_method_arguments(self) -> tuple[Any, ...]:
        self._require_complete()
        return self.bound_values()[self.constructor_parameter_count :]

    def get_argument_strings(self, nulls_ok: bool) -> list[str]:
        """Render every bound value through its source's description.

        Raises:
            CouldNotGenerateValueError: If *nulls_ok* is False and a bound
                value is None.
        """
        if not nulls_ok and any(b.value is None for b in self._bindings):
            msg = "a bound value is None and nulls are not accepted"
            raise CouldNotGenerateValueError(msg)
        return [b.source.describe(b.value) for b in self._bindings]

    # -- identity ----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Assignments):
            return NotImplemented
        return (
            self.signatures == other.signatures
            and self.bound_values() == other.bound_values()
        )

    def __hash__(self) -> int:
        # Bound values may be unhashable; equal assignments still agree on this.
        return hash((self.signatures, len(self._bindings)))

    def __repr__(self) -> str:
        bound = ", ".join(
            f"{b.signature.name}={b.source.describe(b.value)}" for b in self._bindings
        )
        return f"Assignments({bound}; {len(self.unassigned())} unassigned)"
