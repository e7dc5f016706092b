"""Lifecycle runner: validate a test class, expand its methods, run every invocation.

Provides ``TheoryRunner`` for one class and ``run_classes`` for several,
plus the configuration helpers shared with the CLI: environment overrides
and logging setup.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import inspect
import logging
import os
from typing import Any

from theories.datapoints import is_theory
from theories.engine import ExpansionEngine
from theories.execution import run_invocation
from theories.invocation import TheoryInvocation
from theories.models import (
    InitializationFailure,
    InvocationResult,
    Outcome,
    TheoryConfig,
    TheoryReport,
)
from theories.validation import InitializationError, validate_test_class

logger = logging.getLogger(__name__)

_TEST_PREFIX = "test"


# ---------------------------------------------------------------------------
# Environment variable support
# ---------------------------------------------------------------------------

_ENV_FIELD_MAP: dict[str, str] = {
    "THEORIES_LOG_LEVEL": "log_level",
    "THEORIES_FAIL_FAST": "fail_fast",
}
"""Maps environment variable names to TheoryConfig field names."""

_TRUE_STRINGS = frozenset({"1", "true", "yes", "on"})
_FALSE_STRINGS = frozenset({"0", "false", "no", "off"})


def apply_env_overrides(config: TheoryConfig) -> TheoryConfig:
    """Apply ``THEORIES_*`` env var overrides to a config.

    Environment variables only replace fields still at their default
    value; explicitly configured values win. Unparseable values are
    ignored.

    Args:
        config: The configuration to apply overrides to.

    Returns:
        A new ``TheoryConfig`` with env var overrides applied.
    """
    defaults = TheoryConfig()
    overrides: dict[str, Any] = {}

    for env_var, field_name in _ENV_FIELD_MAP.items():
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue
        if getattr(config, field_name) != getattr(defaults, field_name):
            continue
        parsed = _parse_env_value(field_name, env_value)
        if parsed is not None:
            overrides[field_name] = parsed

    if not overrides:
        return config
    try:
        return TheoryConfig(**{**config.model_dump(), **overrides})
    except ValueError:
        logger.warning("Ignoring invalid THEORIES_* environment overrides: %s", overrides)
        return config


def _parse_env_value(field_name: str, raw: str) -> Any:
    if field_name == "log_level":
        return raw
    if field_name == "fail_fast":
        lowered = raw.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    return None


# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(config: TheoryConfig) -> None:
    """Configure the ``"theories"`` logger.

    Adds a console handler and, when ``config.log_file`` is set, a file
    handler. Repeated calls do not duplicate handlers.
    """
    root = logging.getLogger("theories")
    root.setLevel(getattr(logging, config.log_level, logging.WARNING))

    if not any(
        type(h) is logging.StreamHandler for h in root.handlers
    ):
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(_LOG_FORMAT))
        root.addHandler(console)

    if config.log_file is not None:
        target = os.path.abspath(config.log_file)
        has_file = any(
            isinstance(h, logging.FileHandler) and h.baseFilename == target
            for h in root.handlers
        )
        if not has_file:
            file_handler = logging.FileHandler(config.log_file)
            file_handler.setFormatter(logging.Formatter(_LOG_FORMAT))
            root.addHandler(file_handler)


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class TheoryRunner:
    """Runs every test method of one class over every compatible assignment.

    Plain test methods (``test*`` functions without parameters) run once
    per constructor assignment; theories run once per complete assignment
    of constructor and method parameters.
    """

    def __init__(self, test_class: type, config: TheoryConfig | None = None) -> None:
        self.test_class = test_class
        self.config = config or TheoryConfig()
        self.engine = ExpansionEngine()

    def compute_test_methods(self) -> list[Callable[..., Any]]:
        """Plain test methods followed by theories, each in declaration order."""
        seen: set[str] = set()
        plain: list[Callable[..., Any]] = []
        theories: list[Callable[..., Any]] = []
        for klass in self.test_class.__mro__:
            if klass is object:
                continue
            for name, attr in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if is_theory(attr):
                    theories.append(attr)
                elif name.startswith(_TEST_PREFIX) and inspect.isfunction(attr):
                    plain.append(attr)
        return plain + theories

    def validate(self) -> None:
        """Raise ``InitializationError`` if the class is malformed."""
        validate_test_class(self.test_class, self.compute_test_methods())

    def compute_invocations(self) -> list[TheoryInvocation]:
        """Validate the class and expand every test method into invocations."""
        self.validate()
        self.engine = ExpansionEngine()
        invocations: list[TheoryInvocation] = []
        for method in self.compute_test_methods():
            for assignments in self.engine.compute_for_method(method, self.test_class):
                invocations.append(TheoryInvocation(method, assignments, self.test_class))
        logger.info(
            "%s: %d invocation(s)", self.test_class.__qualname__, len(invocations)
        )
        return invocations

    def run(
        self, on_result: Callable[[InvocationResult], None] | None = None
    ) -> TheoryReport:
        """Run every invocation and return the report.

        Args:
            on_result: Called with each result as soon as it is available.

        Raises:
            InitializationError: If the class fails validation.
        """
        results: list[InvocationResult] = []
        for invocation in self.compute_invocations():
            result = run_invocation(invocation)
            results.append(result)
            if on_result is not None:
                on_result(result)
            if self.config.fail_fast and result.outcome == Outcome.FAILED:
                logger.info("Stopping %s after first failure", self.test_class.__qualname__)
                break
        return TheoryReport(results=results, discarded=list(self.engine.discarded))


def run_classes(
    classes: Iterable[type],
    config: TheoryConfig | None = None,
    on_result: Callable[[InvocationResult], None] | None = None,
) -> TheoryReport:
    """Run several classes in order and merge their reports.

    A class that fails validation is recorded on the report and the
    remaining classes still run.
    """
    config = config or TheoryConfig()
    report = TheoryReport()
    for test_class in classes:
        try:
            class_report = TheoryRunner(test_class, config).run(on_result)
        except InitializationError as exc:
            class_report = TheoryReport(
                initialization_errors=[
                    InitializationFailure(
                        class_name=test_class.__qualname__, errors=exc.errors
                    )
                ]
            )
        report = report.merge(class_report)
        if config.fail_fast and report.failed:
            break
    return report
