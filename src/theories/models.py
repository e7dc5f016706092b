"""Core data models for the theories runner.

Defines the shared Pydantic models and enums used across the package:
runner configuration, per-invocation results, discarded search branches,
and the aggregated report handed back to callers.
"""

from __future__ import annotations

from enum import StrEnum
import logging

from pydantic import BaseModel, ConfigDict, field_validator


class Outcome(StrEnum):
    """Terminal state of one completed theory invocation."""

    SKIPPED = "skipped"
    PASSED = "passed"
    FAILED = "failed"


class TheoryConfig(BaseModel):
    """Runner configuration.

    Attributes:
        log_level: Logging level name for the ``"theories"`` logger.
        log_file: Optional path of a log file to append to.
        fail_fast: Stop running a class after its first failed invocation.
        show_skipped: Whether the CLI prints skipped invocations.
    """

    model_config = ConfigDict(frozen=True)

    log_level: str = "WARNING"
    log_file: str | None = None
    fail_fast: bool = False
    show_skipped: bool = True

    @field_validator("log_level")
    @classmethod
    def _must_be_known_level(cls, v: str) -> str:
        """Validate that *v* names a standard logging level."""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            msg = f"Unknown log level: {v!r}"
            raise ValueError(msg)
        return level


class DiscardedBranch(BaseModel):
    """A search branch dropped because a candidate could not be generated.

    Attributes:
        method_name: Name of the method whose assignments were expanded.
        parameter_name: Parameter that was being bound.
        parameter_index: Position of the parameter among all bound parameters.
        source: Description of the failing candidate source, if one was chosen.
        reason: Rendered cause of the failure.
    """

    model_config = ConfigDict(frozen=True)

    method_name: str
    parameter_name: str
    parameter_index: int
    source: str | None = None
    reason: str


class InvocationResult(BaseModel):
    """Classified result of running one completed theory invocation.

    Attributes:
        name: Display name, ``method(arg1, arg2, ...)``.
        outcome: Terminal state.
        message: Failure or assumption message, if any.
        error_traceback: Formatted traceback for failures.
        duration_seconds: Wall-clock time spent on the invocation.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    outcome: Outcome
    message: str | None = None
    error_traceback: str | None = None
    duration_seconds: float = 0.0


class InitializationFailure(BaseModel):
    """A test class that failed validation and was not run.

    Attributes:
        class_name: Qualified name of the class.
        errors: One message per problem found.
    """

    model_config = ConfigDict(frozen=True)

    class_name: str
    errors: list[str]


class TheoryReport(BaseModel):
    """Aggregated results for one or more test classes.

    Attributes:
        results: Invocation results in execution order.
        discarded: Branches dropped during assignment expansion.
        initialization_errors: Classes that failed validation, reported
            separately from invocation failures.
    """

    model_config = ConfigDict(frozen=True)

    results: list[InvocationResult] = []
    discarded: list[DiscardedBranch] = []
    initialization_errors: list[InitializationFailure] = []

    def count(self, outcome: Outcome) -> int:
        """Number of results that ended in *outcome*."""
        return sum(1 for r in self.results if r.outcome == outcome)

    @property
    def passed(self) -> int:
        return self.count(Outcome.PASSED)

    @property
    def failed(self) -> int:
        return self.count(Outcome.FAILED)

    @property
    def skipped(self) -> int:
        return self.count(Outcome.SKIPPED)

    @property
    def was_successful(self) -> bool:
        """True when no invocation failed and every class validated."""
        return self.failed == 0 and not self.initialization_errors

    def merge(self, other: TheoryReport) -> TheoryReport:
        """Return a new report holding this report's entries followed by *other*'s."""
        return TheoryReport(
            results=[*self.results, *other.results],
            discarded=[*self.discarded, *other.discarded],
            initialization_errors=[
                *self.initialization_errors,
                *other.initialization_errors,
            ],
        )
