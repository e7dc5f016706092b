"""Assignment expansion: depth-first search over partial assignments.

Starting from the all-unassigned state, every candidate source of the next
parameter is bound in turn and the search recurses until the assignment is
complete. The result is the cartesian product of the per-parameter
candidate lists, in declaration order for parameters and source order for
candidates, restricted to branches whose sources could all be generated.

Candidate sources must be finite; an infinite source never terminates.
"""

from __future__ import annotations

from collections.abc import Callable
import logging
from typing import Any

from theories.assignments import Assignments
from theories.models import DiscardedBranch
from theories.potential import CouldNotGenerateValueError, PotentialAssignment, safe_str

logger = logging.getLogger(__name__)


class ExpansionEngine:
    """Expands partial assignments into every complete assignment.

    Branches dropped because a candidate could not be generated are logged
    at WARNING and recorded on ``discarded``; they never stop the search.
    """

    def __init__(self) -> None:
        self.discarded: list[DiscardedBranch] = []

    def compute_assignments(
        self, start: Assignments, *, method_name: str = "<theory>"
    ) -> list[Assignments]:
        """Return every complete assignment reachable from *start*, in search order."""
        results: list[Assignments] = []
        self._search(start, results, method_name)
        logger.debug(
            "%s: %d complete assignment(s)", method_name, len(results)
        )
        return results

    def compute_for_method(
        self, method: Callable[..., Any], test_class: type
    ) -> list[Assignments]:
        """Expand *method* of *test_class* from the all-unassigned state."""
        return self.compute_assignments(
            Assignments.all_unassigned(method, test_class),
            method_name=method.__name__,
        )

    def _search(
        self, state: Assignments, results: list[Assignments], method_name: str
    ) -> None:
        if state.is_complete():
            results.append(state)
            return
        try:
            sources = state.potentials_for_next()
        except CouldNotGenerateValueError as exc:
            self._discard(state, None, exc, method_name)
            return
        for source in sources:
            try:
                child = state.assign_next(source)
            except CouldNotGenerateValueError as exc:
                self._discard(state, source, exc, method_name)
                continue
            self._search(child, results, method_name)

    def _discard(
        self,
        state: Assignments,
        source: PotentialAssignment | None,
        exc: CouldNotGenerateValueError,
        method_name: str,
    ) -> None:
        signature = state.next_unassigned()
        branch = DiscardedBranch(
            method_name=method_name,
            parameter_name=signature.name,
            parameter_index=len(state.bindings),
            source=source.name if source is not None else None,
            reason=safe_str(exc),
        )
        self.discarded.append(branch)
        logger.warning(
            "%s: discarded branch at parameter %s (source %s): %s",
            method_name,
            signature.name,
            branch.source or "<candidate list>",
            branch.reason,
        )
