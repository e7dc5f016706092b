"""Shared fixtures for the theories test suite."""

from __future__ import annotations

from collections.abc import Callable, Sequence
import logging
from typing import Any

import pytest
from theories.assignments import Assignments
from theories.models import TheoryConfig
from theories.potential import PotentialAssignment
from theories.signatures import ParameterSignature

# ---------------------------------------------------------------------------
# Factory functions (plain functions, importable from conftest)
# ---------------------------------------------------------------------------


def make_config(**overrides: Any) -> TheoryConfig:
    """Build a valid TheoryConfig with sensible defaults.

    Args:
        **overrides: Field values to override.

    Returns:
        A fully constructed TheoryConfig instance.
    """
    defaults: dict[str, Any] = {}
    defaults.update(overrides)
    return TheoryConfig(**defaults)


def make_signature(**overrides: Any) -> ParameterSignature:
    """Build a ParameterSignature for an unannotated first parameter.

    Args:
        **overrides: Field values to override.

    Returns:
        A fully constructed ParameterSignature instance.
    """
    defaults: dict[str, Any] = {"index": 0, "name": "x"}
    defaults.update(overrides)
    return ParameterSignature(**defaults)


def values_provider(
    candidates: Sequence[Sequence[Any]],
) -> Callable[[ParameterSignature, Assignments], list[PotentialAssignment]]:
    """Provider giving parameter ``i`` the fixed candidates ``candidates[i]``.

    Candidate ``j`` of parameter ``i`` is named ``p{i}v{j}``.
    """

    def provide(
        signature: ParameterSignature, assignments: Assignments
    ) -> list[PotentialAssignment]:
        position = len(assignments.bindings)
        return [
            PotentialAssignment.for_value(f"p{position}v{j}", value)
            for j, value in enumerate(candidates[position])
        ]

    return provide


def make_start(
    candidates: Sequence[Sequence[Any]],
    *,
    constructor_count: int = 0,
    provider: Callable[..., list[PotentialAssignment]] | None = None,
) -> Assignments:
    """Build an all-unassigned Assignments over ``len(candidates)`` parameters.

    The first *constructor_count* parameters are constructor parameters.

    Args:
        candidates: Fixed candidates per parameter, in order.
        constructor_count: How many leading parameters belong to the constructor.
        provider: Candidate provider; defaults to ``values_provider(candidates)``.
    """
    signatures = [
        make_signature(index=i, name=f"p{i}") for i in range(len(candidates))
    ]
    return Assignments(
        signatures[constructor_count:],
        provider or values_provider(candidates),
        constructor_signatures=signatures[:constructor_count],
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def clean_theories_logger() -> Any:
    """Remove handlers added to the ``"theories"`` logger during a test."""
    logger = logging.getLogger("theories")
    before = list(logger.handlers)
    level = logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in before:
            handler.close()
            logger.removeHandler(handler)
    logger.setLevel(level)
