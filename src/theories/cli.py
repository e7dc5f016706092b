"""CLI entry point for the theories runner.

Provides ``main()`` as the console-script entry point registered in
``pyproject.toml`` as ``theories = "theories.cli:main"``. Loads the target
module, picks its test classes, runs them, and prints one line per
invocation followed by a summary.
"""

from __future__ import annotations

import argparse
import importlib
import importlib.util
import inspect
from pathlib import Path
import sys
from types import ModuleType
from typing import Any

import yaml

from theories.datapoints import is_theory
from theories.models import InvocationResult, Outcome, TheoryConfig, TheoryReport
from theories.runner import apply_env_overrides, configure_logging, run_classes

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="theories",
        description="Run every compatible data-point combination of the theories in a module.",
    )
    parser.add_argument(
        "target",
        help="Python file or dotted module, optionally suffixed with ::ClassName.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to an optional TheoryConfig YAML file.",
    )
    parser.add_argument("--log-level", default=None, help="Override the log level.")
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop after the first failed invocation.",
    )
    return parser


def _load_yaml(path: str, label: str) -> dict[str, Any]:
    """Read *path* as a YAML mapping of TheoryConfig fields."""
    file_path = Path(path)
    if not file_path.exists():
        msg = f"{label} file not found: {path}"
        raise FileNotFoundError(msg)
    data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        msg = f"{label} file must contain a YAML mapping, got {type(data).__name__}"
        raise ValueError(msg)
    return data


def load_config(
    config_path: str | None, log_level: str | None = None, fail_fast: bool = False
) -> TheoryConfig:
    """Build the effective configuration: file, then env vars, then flags."""
    data: dict[str, Any] = {}
    if config_path is not None:
        data = _load_yaml(config_path, "config")
    config = apply_env_overrides(TheoryConfig(**data))
    overrides: dict[str, Any] = {}
    if log_level is not None:
        overrides["log_level"] = log_level
    if fail_fast:
        overrides["fail_fast"] = True
    if overrides:
        config = TheoryConfig(**{**config.model_dump(), **overrides})
    return config


def load_module(target: str) -> ModuleType:
    """Import *target*, a ``.py`` path or a dotted module name.

    Raises:
        FileNotFoundError: If *target* looks like a path that does not exist.
        ImportError: If the module cannot be loaded.
    """
    if target.endswith(".py") or "/" in target:
        path = Path(target)
        if not path.exists():
            msg = f"test module not found: {target}"
            raise FileNotFoundError(msg)
        module_name = f"_theories_target_{path.stem}"
        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            msg = f"cannot load {target}"
            raise ImportError(msg)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        return module
    return importlib.import_module(target)


def _declares_theories(klass: type) -> bool:
    return any(is_theory(attr) for attr in vars(klass).values())


def select_classes(module: ModuleType, class_name: str | None = None) -> list[type]:
    """Test classes defined in *module*: ``Test*`` classes and classes declaring theories.

    Raises:
        LookupError: If *class_name* is given but not defined in *module*.
    """
    if class_name is not None:
        klass = getattr(module, class_name, None)
        if not inspect.isclass(klass):
            msg = f"class {class_name} not found in {module.__name__}"
            raise LookupError(msg)
        return [klass]
    return [
        klass
        for name, klass in vars(module).items()
        if inspect.isclass(klass)
        and klass.__module__ == module.__name__
        and (name.startswith("Test") or _declares_theories(klass))
    ]


def _print_result(result: InvocationResult, show_skipped: bool) -> None:
    if result.outcome == Outcome.SKIPPED and not show_skipped:
        return
    print(f"{result.outcome.upper():<8} {result.name}")
    if result.outcome == Outcome.FAILED and result.message:
        print(f"         {result.message}")


def _print_initialization_errors(report: TheoryReport) -> None:
    for failure in report.initialization_errors:
        print(f"Initialization error in {failure.class_name}:", file=sys.stderr)
        for error in failure.errors:
            print(f"  - {error}", file=sys.stderr)


def _print_summary(report: TheoryReport) -> None:
    sep = "=" * 60
    print(sep)
    print(
        f"{report.passed} passed, {report.failed} failed, {report.skipped} skipped"
        + (f", {len(report.discarded)} branch(es) discarded" if report.discarded else "")
        + (
            f", {len(report.initialization_errors)} class(es) failed validation"
            if report.initialization_errors
            else ""
        )
    )
    print(sep)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the theories CLI application.

    Returns:
        Exit code: 0 when nothing failed, 1 on failed invocations, 2 on
        usage, loading or initialization errors.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    module_target, _, class_name = args.target.partition("::")

    try:
        config = load_config(args.config, args.log_level, args.fail_fast)
        configure_logging(config)
        module = load_module(module_target)
        classes = select_classes(module, class_name or None)
        report = run_classes(
            classes,
            config,
            on_result=lambda r: _print_result(r, config.show_skipped),
        )
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_ERROR

    _print_initialization_errors(report)
    _print_summary(report)
    if report.initialization_errors:
        return EXIT_ERROR
    return EXIT_OK if report.was_successful else EXIT_FAILURES


if __name__ == "__main__":
    sys.exit(main())
