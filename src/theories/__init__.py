"""Theories: run a test method over every compatible combination of data points."""

from theories.assignments import Assignments, Binding
from theories.assumptions import (
    AssumptionViolatedError,
    assume,
    assume_no_exception,
    assume_not_none,
)
from theories.datapoints import (
    DataPoint,
    DataPoints,
    datapoint,
    datapoints,
    is_theory,
    theory,
)
from theories.engine import ExpansionEngine
from theories.execution import ParameterizedAssertionError, method_block, run_invocation
from theories.invocation import TheoryInvocation
from theories.models import (
    DiscardedBranch,
    InitializationFailure,
    InvocationResult,
    Outcome,
    TheoryConfig,
    TheoryReport,
)
from theories.potential import CouldNotGenerateValueError, PotentialAssignment
from theories.runner import TheoryRunner, run_classes
from theories.signatures import ParameterSignature, SuppliedBy, TestedOn
from theories.suppliers import ParameterSupplier
from theories.validation import InitializationError

__all__ = [
    "Assignments",
    "AssumptionViolatedError",
    "Binding",
    "CouldNotGenerateValueError",
    "DataPoint",
    "DataPoints",
    "DiscardedBranch",
    "ExpansionEngine",
    "InitializationError",
    "InitializationFailure",
    "InvocationResult",
    "Outcome",
    "ParameterSignature",
    "ParameterSupplier",
    "ParameterizedAssertionError",
    "PotentialAssignment",
    "SuppliedBy",
    "TestedOn",
    "TheoryConfig",
    "TheoryInvocation",
    "TheoryReport",
    "TheoryRunner",
    "assume",
    "assume_no_exception",
    "assume_not_none",
    "datapoint",
    "datapoints",
    "is_theory",
    "method_block",
    "run_classes",
    "run_invocation",
    "theory",
]
