"""Tests for the execution wrapper in ``src/theories/execution.py``.

Covers classification into skipped/passed/failed, the null guard for
constructor and method arguments, failure wrapping with rendered
arguments, unwrapped failures for parameterless methods, and the
setup/teardown hooks.
"""

from __future__ import annotations

from typing import Annotated, Any

import pytest
from theories.assumptions import AssumptionViolatedError, assume
from theories.datapoints import theory
from theories.engine import ExpansionEngine
from theories.execution import (
    ParameterizedAssertionError,
    method_block,
    run_invocation,
)
from theories.invocation import TheoryInvocation
from theories.models import Outcome
from theories.signatures import TestedOn

EVENTS: list[str] = []


class BodyTheories:
    @theory
    def positive(self, a: Annotated[int, TestedOn(-1, 2)]) -> None:
        assume(a > 0, "needs a positive number")
        assert a % 2 == 0

    @theory
    def sums(
        self,
        a: Annotated[int, TestedOn(1, 2)],
        b: Annotated[str, TestedOn("x", "y")],
    ) -> None:
        assert not (a == 2 and b == "y"), "two and y do not mix"

    @theory
    def nullable(self, a: Annotated[int | None, TestedOn(None, 1)]) -> None:
        pass

    @theory(nulls_accepted=True)
    def nulls_welcome(self, a: Annotated[int | None, TestedOn(None)]) -> None:
        assert a is None

    def test_plain_failure(self) -> None:
        raise ValueError("plain failure")

    def test_plain_pass(self) -> None:
        pass


class ConstructedTheories:
    def __init__(self, base: Annotated[int | None, TestedOn(None, 10)]) -> None:
        self.base = base

    @theory
    def uses_base(self, a: Annotated[int, TestedOn(1)]) -> None:
        assert self.base + a == 11


class HookedTheories:
    def setup_method(self, method: Any) -> None:
        EVENTS.append(f"setup {method.__name__}")

    def teardown_method(self, method: Any) -> None:
        EVENTS.append(f"teardown {method.__name__}")

    @theory
    def body(self, a: Annotated[int, TestedOn(1, 2)]) -> None:
        EVENTS.append(f"body {a}")
        assert a == 1


class BadRepr:
    def __repr__(self) -> str:
        raise RuntimeError("repr exploded")


class BrokenStrError(Exception):
    def __str__(self) -> str:
        raise RuntimeError("str broken")


class BrokenMessageTheories:
    @theory
    def odd_failure(self, a: Annotated[int, TestedOn(1, 2)]) -> None:
        if a == 1:
            raise BrokenStrError

    def test_plain_odd_failure(self) -> None:
        raise BrokenStrError


class BrokenRenderTheories:
    @theory
    def fails(self, a: Annotated[object, TestedOn(BadRepr())]) -> None:
        raise AssertionError("always")


def _invocations(test_class: type, method: Any) -> list[TheoryInvocation]:
    return [
        TheoryInvocation(method, a, test_class)
        for a in ExpansionEngine().compute_for_method(method, test_class)
    ]


def _outcomes(test_class: type, method: Any) -> list[Outcome]:
    return [run_invocation(i).outcome for i in _invocations(test_class, method)]


# ===========================================================================
# Classification
# ===========================================================================


@pytest.mark.unit
class TestClassification:
    """Each invocation is classified independently."""

    def test_skip_and_pass(self) -> None:
        assert _outcomes(BodyTheories, BodyTheories.positive) == [
            Outcome.SKIPPED,
            Outcome.PASSED,
        ]

    def test_failure_isolated_to_one_combination(self) -> None:
        assert _outcomes(BodyTheories, BodyTheories.sums) == [
            Outcome.PASSED,
            Outcome.PASSED,
            Outcome.PASSED,
            Outcome.FAILED,
        ]

    def test_skip_message_kept(self) -> None:
        skipped = run_invocation(_invocations(BodyTheories, BodyTheories.positive)[0])
        assert skipped.message == "needs a positive number"
        assert skipped.error_traceback is None

    def test_failure_result_details(self) -> None:
        failed = run_invocation(_invocations(BodyTheories, BodyTheories.sums)[3])
        assert failed.outcome == Outcome.FAILED
        assert failed.name == "sums(2 <from TestedOn[1]>, 'y' <from TestedOn[1]>)"
        assert "ParameterizedAssertionError" in failed.message
        assert "two and y do not mix" in failed.message
        assert "Traceback" in failed.error_traceback
        assert failed.duration_seconds >= 0.0


# ===========================================================================
# Null guard
# ===========================================================================


@pytest.mark.unit
class TestNullGuard:
    """None arguments skip unless the theory accepts nulls."""

    def test_null_method_argument_skips(self) -> None:
        assert _outcomes(BodyTheories, BodyTheories.nullable) == [
            Outcome.SKIPPED,
            Outcome.PASSED,
        ]

    def test_nulls_accepted(self) -> None:
        assert _outcomes(BodyTheories, BodyTheories.nulls_welcome) == [Outcome.PASSED]

    def test_null_constructor_argument_skips_before_construction(self) -> None:
        assert _outcomes(ConstructedTheories, ConstructedTheories.uses_base) == [
            Outcome.SKIPPED,
            Outcome.PASSED,
        ]

    def test_null_guard_raises_assumption(self) -> None:
        invocation = _invocations(BodyTheories, BodyTheories.nullable)[0]
        with pytest.raises(AssumptionViolatedError, match="position 0"):
            method_block(invocation)


# ===========================================================================
# Failure wrapping
# ===========================================================================


@pytest.mark.unit
class TestFailureWrapping:
    """Failures name every bound argument in parameter order."""

    def test_wrapped_with_arguments(self) -> None:
        invocation = _invocations(BodyTheories, BodyTheories.sums)[3]
        with pytest.raises(ParameterizedAssertionError) as info:
            method_block(invocation)
        error = info.value
        assert str(error) == "sums(2 <from TestedOn[1]>, 'y' <from TestedOn[1]>)"
        assert error.method_name == "sums"
        assert error.arguments == ("2 <from TestedOn[1]>", "'y' <from TestedOn[1]>")
        assert isinstance(error.__cause__, AssertionError)
        assert isinstance(error, AssertionError)

    def test_constructor_arguments_included(self) -> None:
        class Failing(ConstructedTheories):
            @theory
            def always(self, a: Annotated[int, TestedOn(3)]) -> None:
                raise RuntimeError("nope")

        invocation = _invocations(Failing, Failing.always)[1]
        with pytest.raises(ParameterizedAssertionError) as info:
            method_block(invocation)
        assert info.value.arguments == ("10 <from TestedOn[1]>", "3 <from TestedOn[0]>")
        assert isinstance(info.value.__cause__, RuntimeError)

    def test_parameterless_failure_not_wrapped(self) -> None:
        [invocation] = _invocations(BodyTheories, BodyTheories.test_plain_failure)
        with pytest.raises(ValueError, match="plain failure"):
            method_block(invocation)
        result = run_invocation(invocation)
        assert result.outcome == Outcome.FAILED
        assert result.message == "ValueError: plain failure"

    def test_parameterless_pass(self) -> None:
        [invocation] = _invocations(BodyTheories, BodyTheories.test_plain_pass)
        assert run_invocation(invocation).outcome == Outcome.PASSED

    def test_broken_repr_does_not_break_reporting(self) -> None:
        [invocation] = _invocations(BrokenRenderTheories, BrokenRenderTheories.fails)
        with pytest.raises(ParameterizedAssertionError) as info:
            method_block(invocation)
        assert str(info.value) == "fails([repr failed] <from TestedOn[0]>)"
        assert run_invocation(invocation).outcome == Outcome.FAILED


@pytest.mark.unit
class TestUnprintableFailures:
    """An exception whose message cannot be rendered is still reported."""

    def test_wrapped_failure_does_not_stop_siblings(self) -> None:
        invocations = _invocations(BrokenMessageTheories, BrokenMessageTheories.odd_failure)
        results = [run_invocation(i) for i in invocations]
        assert [r.outcome for r in results] == [Outcome.FAILED, Outcome.PASSED]
        assert results[0].message == (
            "ParameterizedAssertionError: odd_failure(1 <from TestedOn[0]>) "
            "caused by BrokenStrError: [str failed]"
        )
        assert "BrokenStrError" in results[0].error_traceback

    def test_parameterless_failure(self) -> None:
        [invocation] = _invocations(
            BrokenMessageTheories, BrokenMessageTheories.test_plain_odd_failure
        )
        result = run_invocation(invocation)
        assert result.outcome == Outcome.FAILED
        assert result.message == "BrokenStrError: [str failed]"


# ===========================================================================
# Hooks
# ===========================================================================


@pytest.mark.unit
class TestHooks:
    """setup_method/teardown_method wrap every invocation on a fresh instance."""

    def test_hooks_wrap_body_even_on_failure(self) -> None:
        EVENTS.clear()
        outcomes = _outcomes(HookedTheories, HookedTheories.body)
        assert outcomes == [Outcome.PASSED, Outcome.FAILED]
        assert EVENTS == [
            "setup body",
            "body 1",
            "teardown body",
            "setup body",
            "body 2",
            "teardown body",
        ]

    def test_fresh_instance_per_invocation(self) -> None:
        instances: list[Any] = []

        class Recording:
            @theory
            def record(self, a: Annotated[int, TestedOn(1, 2)]) -> None:
                instances.append(self)

        for invocation in _invocations(Recording, Recording.record):
            run_invocation(invocation)
        assert len(instances) == 2
        assert instances[0] is not instances[1]
