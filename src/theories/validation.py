"""Collection-time validation of test classes.

Every problem found is reported together as one ``InitializationError``
before any invocation runs, so a malformed class never produces
per-invocation failures.
"""

from __future__ import annotations

from collections.abc import Callable
import inspect
import logging
from typing import Any

from theories.datapoints import DataPointFunction, data_members, is_theory
from theories.signatures import (
    SuppliedBy,
    constructor_signatures,
    has_custom_constructor,
    is_type_variable,
    required_parameters,
    signatures_of,
    variadic_parameters,
)

logger = logging.getLogger(__name__)


class InitializationError(Exception):
    """A test class is malformed.

    Attributes:
        test_class: The offending class.
        errors: One message per problem found.
    """

    def __init__(self, test_class: type, errors: list[str]) -> None:
        """Initialize with the offending class and the problems found.

        Args:
            test_class: The class that failed validation.
            errors: Human-readable problem descriptions.
        """
        super().__init__(
            f"{test_class.__qualname__} failed validation: " + "; ".join(errors)
        )
        self.test_class = test_class
        self.errors = errors


def collect_initialization_errors(
    test_class: type, test_methods: list[Callable[..., Any]]
) -> list[str]:
    """Return every validation problem of *test_class* and its *test_methods*."""
    errors: list[str] = []
    _validate_data_points(test_class, errors)
    _validate_constructor(test_class, errors)
    for method in test_methods:
        _validate_test_method(method, errors)
    return errors


def validate_test_class(
    test_class: type, test_methods: list[Callable[..., Any]]
) -> None:
    """Raise ``InitializationError`` if *test_class* has any validation problem."""
    errors = collect_initialization_errors(test_class, test_methods)
    if errors:
        logger.error(
            "%s: %d initialization error(s)", test_class.__qualname__, len(errors)
        )
        raise InitializationError(test_class, errors)


def _validate_data_points(test_class: type, errors: list[str]) -> None:
    for name, member in data_members(test_class):
        is_function = isinstance(member, DataPointFunction)
        kind = "method" if is_function else "field"
        if name.startswith("_"):
            errors.append(f"DataPoint {kind} {name} must be public")
        if is_function:
            if required_parameters(member.func):
                errors.append(
                    f"DataPoint method {name} must be static (take no parameters)"
                )


def _validate_constructor(test_class: type, errors: list[str]) -> None:
    if not has_custom_constructor(test_class):
        return
    try:
        signatures = constructor_signatures(test_class)
    except NameError as exc:
        errors.append(f"Constructor of {test_class.__qualname__}: {exc}")
        return
    for name in variadic_parameters(test_class.__init__):
        errors.append(
            f"Constructor of {test_class.__qualname__} must not declare variadic parameter {name}"
        )
    for signature in signatures:
        _validate_supplier(signature.find_metadata(SuppliedBy), errors)


def _validate_test_method(method: Callable[..., Any], errors: list[str]) -> None:
    name = method.__name__
    if not inspect.isfunction(method):
        errors.append(f"Method {name} must be a plain function")
        return
    if name.startswith("_"):
        errors.append(f"Method {name} must be public")
    if inspect.iscoroutinefunction(method):
        errors.append(f"Method {name} must not be a coroutine function")
    try:
        signatures = signatures_of(method)
    except NameError as exc:
        errors.append(f"Method {name}: {exc}")
        return
    if not is_theory(method):
        if signatures:
            errors.append(f"Method {name} should have no parameters")
        return
    for param in variadic_parameters(method):
        errors.append(f"Method {name} must not declare variadic parameter {param}")
    for signature in signatures:
        if is_type_variable(signature.annotation):
            errors.append(
                f"Method {name} parameter {signature.name} is typed with "
                f"unbound type variable {signature.annotation}"
            )
        _validate_supplier(signature.find_metadata(SuppliedBy), errors)


def _validate_supplier(marker: SuppliedBy | None, errors: list[str]) -> None:
    if marker is None:
        return
    supplier = marker.supplier
    label = getattr(supplier, "__qualname__", repr(supplier))
    if not inspect.isclass(supplier):
        errors.append(f"ParameterSupplier {label} must be a class")
        return
    if not callable(getattr(supplier, "get_value_sources", None)):
        errors.append(f"ParameterSupplier {label} must define get_value_sources")
    if len(required_parameters(supplier)) > 1:
        errors.append(
            f"ParameterSupplier {label} constructor must take either nothing "
            "or a single test class"
        )
