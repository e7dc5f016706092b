"""Candidate source providers.

A ``ParameterSupplier`` turns one ``ParameterSignature`` plus the current
partial assignment into an ordered list of ``PotentialAssignment``s.
``ClassCandidateProvider`` picks the right supplier for each parameter of
a test class: an explicit ``SuppliedBy`` marker wins, then inline
``TestedOn`` values, then every compatible data point declared on the
class.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from theories.datapoints import DataPoint, DataPointFunction, DataPoints, data_members
from theories.potential import (
    CouldNotGenerateValueError,
    PotentialAssignment,
    describe_exception,
)
from theories.signatures import ParameterSignature, SuppliedBy, TestedOn, required_parameters

if TYPE_CHECKING:
    from theories.assignments import Assignments

logger = logging.getLogger(__name__)


@runtime_checkable
class ParameterSupplier(Protocol):
    """Protocol for custom candidate suppliers.

    *assignments* is the partial assignment holding every parameter bound
    before *signature*, so a supplier may compute candidates from earlier
    values.
    """

    def get_value_sources(  # noqa: D102
        self, signature: ParameterSignature, assignments: Assignments
    ) -> list[PotentialAssignment]: ...


class AllMembersSupplier:
    """Every data point of the test class compatible with the parameter."""

    def __init__(self, test_class: type) -> None:
        self.test_class = test_class

    def get_value_sources(
        self, signature: ParameterSignature, assignments: Assignments
    ) -> list[PotentialAssignment]:
        sources: list[PotentialAssignment] = []
        for name, member in data_members(self.test_class):
            if isinstance(member, DataPoint):
                source = _data_point_source(signature, name, member)
                if source is not None:
                    sources.append(source)
            elif isinstance(member, DataPoints):
                sources.extend(_matching_elements(signature, name, member.values))
            elif member.many:
                sources.extend(
                    _matching_elements(signature, name, _call_datapoints(name, member))
                )
            else:
                source = PotentialAssignment.lazy(
                    name, _checked_thunk(signature, name, member), member.return_type()
                )
                if _declared_type_matches(signature, source):
                    sources.append(source)
        return sources


class TestedOnSupplier:
    """Candidates listed inline with ``Annotated[T, TestedOn(...)]``."""

    __test__ = False

    def get_value_sources(
        self, signature: ParameterSignature, assignments: Assignments
    ) -> list[PotentialAssignment]:
        marker = signature.find_metadata(TestedOn)
        if marker is None:
            return []
        return [
            PotentialAssignment.for_value(f"TestedOn[{i}]", value)
            for i, value in enumerate(marker.values)
        ]


def _data_point_source(
    signature: ParameterSignature, name: str, point: DataPoint
) -> PotentialAssignment | None:
    if point.declared_type is None:
        if signature.can_accept_value(point.value):
            return PotentialAssignment.for_value(name, point.value)
        return None
    source = PotentialAssignment.for_value(name, point.value, point.declared_type)
    return source if _declared_type_matches(signature, source) else None


def _matching_elements(
    signature: ParameterSignature, name: str, values: Any
) -> list[PotentialAssignment]:
    return [
        PotentialAssignment.for_value(f"{name}[{i}]", value)
        for i, value in enumerate(values)
        if signature.can_accept_value(value)
    ]


def _call_datapoints(name: str, member: DataPointFunction) -> list[Any]:
    try:
        return list(member())
    except Exception as exc:
        msg = f"data points function {name} raised {describe_exception(exc)}"
        raise CouldNotGenerateValueError(msg) from exc


def _declared_type_matches(
    signature: ParameterSignature, source: PotentialAssignment
) -> bool:
    if source.declared_type is None:
        # Unknown until called; the value is checked when bound.
        return True
    return signature.can_accept_type(source.declared_type)


def _checked_thunk(
    signature: ParameterSignature, name: str, member: DataPointFunction
) -> Any:
    def produce() -> Any:
        value = member()
        if not signature.can_accept_value(value):
            msg = (
                f"data point {name} produced {type(value).__name__}, "
                f"incompatible with parameter {signature.name}"
            )
            raise CouldNotGenerateValueError(msg)
        return value

    return produce


# ---------------------------------------------------------------------------
# Supplier resolution
# ---------------------------------------------------------------------------


def instantiate_supplier(supplier_class: type, test_class: type) -> ParameterSupplier:
    """Construct *supplier_class* with no argument, or with the test class.

    Raises:
        TypeError: If the constructor takes anything else.
    """
    params = required_parameters(supplier_class)
    if not params:
        return supplier_class()
    if len(params) == 1:
        return supplier_class(test_class)
    msg = (
        f"ParameterSupplier {supplier_class.__qualname__} constructor must take "
        "either nothing or a single test class"
    )
    raise TypeError(msg)


class ClassCandidateProvider:
    """Candidate provider backed by a test class's declarations."""

    def __init__(self, test_class: type) -> None:
        self.test_class = test_class

    def supplier_for(self, signature: ParameterSignature) -> ParameterSupplier:
        supplied_by = signature.find_metadata(SuppliedBy)
        if supplied_by is not None:
            return instantiate_supplier(supplied_by.supplier, self.test_class)
        if signature.find_metadata(TestedOn) is not None:
            return TestedOnSupplier()
        return AllMembersSupplier(self.test_class)

    def __call__(
        self, signature: ParameterSignature, assignments: Assignments
    ) -> list[PotentialAssignment]:
        supplier = self.supplier_for(signature)
        sources = list(supplier.get_value_sources(signature, assignments))
        logger.debug(
            "%s: %d candidate(s) for parameter %s",
            type(supplier).__name__,
            len(sources),
            signature.name,
        )
        return sources
