"""
minimizer.py — Label Minimization

Decides whether a temporal graph is label-minimal under the wrap/transfer
rewriting system.

Loop (one move per pass):
  1. stop with MAX_ITERATIONS_REACHED once the move cap is hit
  2. find a wrappable edge {u, v}; none left -> USELESS_LABEL_FOUND
  3. find the smallest in-range incident label (w, x, t), x in {u, v}
  4. transfer through (x, other) where other = {u, v} - {x}
  5. wrap: add tmin(uv) to {other, w}, remove it from {u, v}
  6. canonicalize; a state seen before -> CYCLE_DETECTED (minimal)

Internal inconsistencies (step 3 finds nothing, step 5 removal fails)
abort the run with INVARIANT_VIOLATION.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Set

from .graph import TemporalGraph
from .operators import find_min_incident_in_range, find_wrappable_edge, transfer_labels_through_edge
from .types import GraphState, VertexId

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10_000

_UNBOUNDED_VALUES = {"none", "unbounded", "unlimited", "inf"}
_TRUE_VALUES = {"1", "true", "yes", "on"}


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass
class MinimizationConfig:
    """
    Settings for one minimization run.

    max_iterations: move cap, None = unbounded
    track_statistics: accumulate MinimizationStats into the result
    verbose: per-move trace at INFO instead of DEBUG
    """
    max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS
    track_statistics: bool = False
    verbose: bool = False

    def __post_init__(self):
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")

    def with_max_iterations(self, max_iterations: int) -> "MinimizationConfig":
        return dataclasses.replace(self, max_iterations=max_iterations)

    def unlimited_iterations(self) -> "MinimizationConfig":
        return dataclasses.replace(self, max_iterations=None)

    def with_statistics(self) -> "MinimizationConfig":
        return dataclasses.replace(self, track_statistics=True)

    def with_verbose(self) -> "MinimizationConfig":
        return dataclasses.replace(self, verbose=True)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "MinimizationConfig":
        """
        Build a config from TEMPORAL_GRAPH_* environment variables.

        TEMPORAL_GRAPH_MAX_ITERATIONS: integer, or none/unbounded
        TEMPORAL_GRAPH_TRACK_STATS:    1/true/yes/on
        TEMPORAL_GRAPH_VERBOSE:        1/true/yes/on
        """
        env = os.environ if environ is None else environ

        max_iterations: Optional[int] = DEFAULT_MAX_ITERATIONS
        raw = env.get("TEMPORAL_GRAPH_MAX_ITERATIONS")
        if raw is not None and raw.strip():
            raw = raw.strip().lower()
            if raw in _UNBOUNDED_VALUES:
                max_iterations = None
            else:
                try:
                    max_iterations = int(raw)
                except ValueError:
                    raise ValueError(f"TEMPORAL_GRAPH_MAX_ITERATIONS must be an integer or 'none', got {raw!r}")

        return cls(
            max_iterations=max_iterations,
            track_statistics=env.get("TEMPORAL_GRAPH_TRACK_STATS", "").strip().lower() in _TRUE_VALUES,
            verbose=env.get("TEMPORAL_GRAPH_VERBOSE", "").strip().lower() in _TRUE_VALUES,
        )


# =============================================================================
# RESULT TYPES
# =============================================================================

class TerminationReason(Enum):
    """
    Why a run stopped.

    CYCLE_DETECTED: a canonical state repeated -> minimal
    USELESS_LABEL_FOUND: no legal move left -> not minimal
    MAX_ITERATIONS_REACHED: move cap hit -> inconclusive
    INVARIANT_VIOLATION: internal inconsistency, run aborted -> inconclusive
    """
    CYCLE_DETECTED = "CycleDetected"
    USELESS_LABEL_FOUND = "UselessLabelFound"
    MAX_ITERATIONS_REACHED = "MaxIterationsReached"
    INVARIANT_VIOLATION = "InvariantViolation"


@dataclass
class MinimizationStats:
    iterations: int = 0
    transfers_attempted: int = 0
    transfers_successful: int = 0
    # never incremented
    useless_labels_found: int = 0
    states_visited: int = 0

    def to_dict(self) -> Dict[str, int]:
        return dataclasses.asdict(self)


@dataclass
class MinimizationResult:
    is_minimal: bool
    termination_reason: TerminationReason
    stats: Optional[MinimizationStats] = None
    detail: Optional[str] = None

    @property
    def is_conclusive(self) -> bool:
        """False when the verdict proves nothing either way."""
        return self.termination_reason in (
            TerminationReason.CYCLE_DETECTED,
            TerminationReason.USELESS_LABEL_FOUND,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "is_minimal": self.is_minimal,
            "termination_reason": self.termination_reason.value,
            "is_conclusive": self.is_conclusive,
        }
        if self.stats is not None:
            data["stats"] = self.stats.to_dict()
        if self.detail:
            data["detail"] = self.detail
        return data


# =============================================================================
# MINIMIZER
# =============================================================================

@dataclass
class LabelMinimizer:
    """
    Runs the rewriting loop on one graph.

    The graph is mutated in place and must not be touched by anyone else
    while run() executes. An instance runs once.
    """
    graph: TemporalGraph
    config: MinimizationConfig = field(default_factory=MinimizationConfig)
    stats: MinimizationStats = field(default_factory=MinimizationStats)
    seen_states: Set[GraphState] = field(default_factory=set)
    _finished: bool = field(default=False, init=False, repr=False)

    def run(self) -> MinimizationResult:
        if self._finished:
            raise RuntimeError("LabelMinimizer.run() may only be called once")
        self._finished = True

        self.seen_states.add(self.graph.to_state())
        self.stats.states_visited = 1
        self._trace("Starting label minimization on %r", self.graph)

        while True:
            if self._iteration_cap_reached():
                self._trace("Max iterations reached (%d)", self.stats.iterations)
                return self._result(False, TerminationReason.MAX_ITERATIONS_REACHED)

            edge = find_wrappable_edge(self.graph)
            if edge is None:
                self._trace("No wrappable edge left")
                return self._result(False, TerminationReason.USELESS_LABEL_FOUND)
            u, v = edge

            self.stats.iterations += 1
            self._trace("=== Iteration %d === wrappable edge (%d, %d)", self.stats.iterations, u, v)

            incident = find_min_incident_in_range(self.graph, u, v)
            if incident is None:
                logger.warning("Wrappable edge (%d, %d) has no incident label in range", u, v)
                return self._result(
                    False,
                    TerminationReason.INVARIANT_VIOLATION,
                    detail=f"wrappable edge ({u}, {v}) has no incident label in range",
                )
            w, x, t = incident
            other = v if x == u else u
            self._trace("Incident label: w=%d (neighbor), x=%d (common), t=%d; other endpoint %d", w, x, t, other)

            transferred = self._transfer(x, other)
            self._trace("Transferred %d labels through (%d, %d)", transferred, x, other)

            tmin, _ = self.graph.get_edge_time_range(u, v)
            self.graph.add_edge(other, w, tmin)
            self._trace("Wrapped tmin=%d from (%d, %d) onto (%d, %d)", tmin, u, v, other, w)

            if not self.graph.remove_edge_timestamp(u, v, tmin):
                logger.warning("Failed to remove tmin=%d from (%d, %d)", tmin, u, v)
                return self._result(
                    False,
                    TerminationReason.INVARIANT_VIOLATION,
                    detail=f"failed to remove label {tmin} from ({u}, {v})",
                )

            state = self.graph.to_state()
            if state in self.seen_states:
                self._trace("Cycle detected after %d iterations: graph is minimal", self.stats.iterations)
                return self._result(True, TerminationReason.CYCLE_DETECTED)

            self.seen_states.add(state)
            self.stats.states_visited += 1
            self._trace("New state recorded (total states: %d)", self.stats.states_visited)

    def _iteration_cap_reached(self) -> bool:
        cap = self.config.max_iterations
        return cap is not None and self.stats.iterations >= cap

    def _transfer(self, anchor: VertexId, pivot: VertexId) -> int:
        transferred = transfer_labels_through_edge(self.graph, anchor, pivot)
        if self.config.track_statistics:
            self.stats.transfers_attempted += 1
            if transferred > 0:
                self.stats.transfers_successful += 1
        return transferred

    def _result(
        self,
        is_minimal: bool,
        reason: TerminationReason,
        detail: Optional[str] = None,
    ) -> MinimizationResult:
        self._trace("Finished: %s (is_minimal=%s)", reason.value, is_minimal)
        return MinimizationResult(
            is_minimal=is_minimal,
            termination_reason=reason,
            stats=dataclasses.replace(self.stats) if self.config.track_statistics else None,
            detail=detail,
        )

    def _trace(self, msg: str, *args) -> None:
        logger.log(logging.INFO if self.config.verbose else logging.DEBUG, msg, *args)


def is_label_minimal(graph: TemporalGraph, config: Optional[MinimizationConfig] = None) -> MinimizationResult:
    """Run a fresh LabelMinimizer over `graph` (mutated in place)."""
    return LabelMinimizer(graph, config or MinimizationConfig()).run()
