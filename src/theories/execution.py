"""Execution wrapper: run one completed theory invocation and classify it.

``method_block`` builds a fresh test instance from the constructor
arguments, runs the optional ``setup_method``/``teardown_method`` hooks
around the body, and invokes the body with the method arguments.
Assumption failures (including ``None`` arguments for a theory that does
not accept them) propagate untouched; any other failure is re-raised as a
``ParameterizedAssertionError`` naming every bound argument.
``run_invocation`` turns that into an ``InvocationResult``.
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
import time
import traceback
from typing import Any, NoReturn

from theories.assumptions import AssumptionViolatedError, assume_not_none
from theories.datapoints import nulls_ok
from theories.invocation import TheoryInvocation
from theories.models import InvocationResult, Outcome
from theories.potential import CouldNotGenerateValueError, describe_exception, safe_str

logger = logging.getLogger(__name__)


class ParameterizedAssertionError(AssertionError):
    """A test body failure annotated with the arguments that triggered it.

    The message is ``method(arg1, arg2, ...)``; the original failure is
    chained as ``__cause__``.

    Attributes:
        method_name: Name of the failing method.
        arguments: Rendered arguments, constructor arguments first.
    """

    def __init__(self, method_name: str, arguments: Sequence[str]) -> None:
        """Initialize with the failing method's name and rendered arguments.

        Args:
            method_name: Name of the failing method.
            arguments: Rendered arguments in parameter order.
        """
        super().__init__(f"{method_name}({', '.join(arguments)})")
        self.method_name = method_name
        self.arguments = tuple(arguments)


def report_parameterized_error(
    invocation: TheoryInvocation, error: Exception, nulls_accepted: bool
) -> NoReturn:
    """Re-raise *error*, wrapped with the invocation's rendered arguments.

    With no bound parameters, or when the arguments cannot be rendered,
    *error* is re-raised unchanged.
    """
    try:
        arguments = invocation.assignments.get_argument_strings(nulls_accepted)
    except CouldNotGenerateValueError:
        raise error from None
    if not arguments:
        raise error
    raise ParameterizedAssertionError(invocation.method_name, arguments) from error


def create_test(invocation: TheoryInvocation, nulls_accepted: bool) -> Any:
    """Construct a fresh test instance from the constructor arguments.

    Raises:
        AssumptionViolatedError: If an argument is None and nulls are not accepted.
    """
    arguments = invocation.assignments.get_constructor_arguments()
    if not nulls_accepted:
        assume_not_none(*arguments)
    return invocation.test_class(*arguments)


def _invoke(invocation: TheoryInvocation, instance: Any, nulls_accepted: bool) -> None:
    setup = getattr(instance, "setup_method", None)
    if callable(setup):
        setup(invocation.method)
    try:
        arguments = invocation.assignments.get_method_arguments()
        if not nulls_accepted:
            assume_not_none(*arguments)
        invocation.method(instance, *arguments)
    finally:
        teardown = getattr(instance, "teardown_method", None)
        if callable(teardown):
            teardown(invocation.method)


def method_block(invocation: TheoryInvocation) -> None:
    """Run *invocation* once, raising on skip or failure.

    Raises:
        AssumptionViolatedError: The invocation is out of scope (skip).
        ParameterizedAssertionError: The body failed for these arguments.
        Exception: The body failed and no parameter was bound.
    """
    nulls_accepted = nulls_ok(invocation.method)
    try:
        instance = create_test(invocation, nulls_accepted)
        _invoke(invocation, instance, nulls_accepted)
    except AssumptionViolatedError:
        raise
    except Exception as exc:
        report_parameterized_error(invocation, exc, nulls_accepted)


def run_invocation(invocation: TheoryInvocation) -> InvocationResult:
    """Run *invocation* and classify it as skipped, passed or failed."""
    name = invocation.name
    start = time.monotonic()
    try:
        method_block(invocation)
    except AssumptionViolatedError as exc:
        message = safe_str(exc)
        logger.debug("SKIPPED %s: %s", name, message)
        return InvocationResult(
            name=name,
            outcome=Outcome.SKIPPED,
            message=message,
            duration_seconds=time.monotonic() - start,
        )
    except Exception as exc:
        message = _failure_message(exc)
        logger.info("FAILED %s: %s", name, message)
        return InvocationResult(
            name=name,
            outcome=Outcome.FAILED,
            message=message,
            error_traceback="".join(traceback.format_exception(exc)),
            duration_seconds=time.monotonic() - start,
        )
    logger.debug("PASSED %s", name)
    return InvocationResult(
        name=name,
        outcome=Outcome.PASSED,
        duration_seconds=time.monotonic() - start,
    )


def _failure_message(exc: BaseException) -> str:
    message = describe_exception(exc)
    cause = exc.__cause__
    if isinstance(exc, ParameterizedAssertionError) and cause is not None:
        message += f" caused by {describe_exception(cause)}"
    return message
