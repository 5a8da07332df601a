"""
test_minimizer.py — LabelMinimizer verdicts, statistics and configuration

Reference graphs (labels per edge):

  CYCLING:   01:{1,3}  02:{3}  12:{2}
             move 1 wraps 1 from 01 onto 02, move 2 wraps it back -> cycle
  STALLING:  01:{1,3}  12:{2}
             one move, then no wrappable edge is left
  TRANSFER:  01:{1,3}  02:{2}  12:{2}
             the first move transfers 2 from 12 onto 02
"""

import logging

import pytest
from temporal_graph import (
    LabelMinimizer,
    MinimizationConfig,
    MinimizationStats,
    TemporalGraph,
    TerminationReason,
    is_label_minimal,
)
import temporal_graph.minimizer as minimizer_module


def build(*edges):
    graph = TemporalGraph()
    for u, v, t in edges:
        graph.add_edge(u, v, t)
    return graph


def cycling():
    return build((0, 1, 1), (0, 1, 3), (0, 2, 3), (1, 2, 2))


def stalling():
    return build((0, 1, 1), (0, 1, 3), (1, 2, 2))


def with_transfer():
    return build((0, 1, 1), (0, 1, 3), (0, 2, 2), (1, 2, 2))


STATS = MinimizationConfig().with_statistics()


# =============================================================================
# VERDICTS
# =============================================================================

def test_cycle_detected_is_minimal():
    graph = cycling()
    initial = graph.to_state()

    result = LabelMinimizer(graph, STATS).run()

    assert result.is_minimal
    assert result.termination_reason is TerminationReason.CYCLE_DETECTED
    assert result.is_conclusive
    assert result.stats == MinimizationStats(
        iterations=2,
        transfers_attempted=2,
        transfers_successful=0,
        useless_labels_found=0,
        states_visited=2,
    )
    # The run ends on the state it started from.
    assert graph.to_state() == initial


def test_no_move_left_is_not_minimal():
    graph = stalling()
    result = LabelMinimizer(graph, STATS).run()

    assert not result.is_minimal
    assert result.termination_reason is TerminationReason.USELESS_LABEL_FOUND
    assert result.is_conclusive
    assert result.stats.iterations == 1
    assert result.stats.states_visited == 2
    assert result.stats.useless_labels_found == 0

    assert graph.edge_times(0, 1) == [3]
    assert graph.edge_times(0, 2) == [1]
    assert graph.edge_times(1, 2) == [2]


def test_already_stuck_graph():
    graph = build((0, 1, 5), (1, 2, 3))
    result = LabelMinimizer(graph, STATS).run()

    assert result.termination_reason is TerminationReason.USELESS_LABEL_FOUND
    assert result.stats.iterations == 0
    assert result.stats.states_visited == 1


def test_empty_graph():
    result = LabelMinimizer(TemporalGraph()).run()
    assert result.termination_reason is TerminationReason.USELESS_LABEL_FOUND
    assert not result.is_minimal


def test_transfer_statistics():
    graph = with_transfer()
    result = LabelMinimizer(graph, STATS).run()

    assert result.termination_reason is TerminationReason.USELESS_LABEL_FOUND
    assert result.stats.transfers_attempted == 1
    assert result.stats.transfers_successful == 1
    assert graph.edge_times(0, 1) == [3]
    assert graph.edge_times(0, 2) == [2]
    assert graph.edge_times(1, 2) == [1]


# =============================================================================
# ITERATION CAP
# =============================================================================

@pytest.mark.parametrize("make_graph", [cycling, stalling, with_transfer])
def test_zero_cap_stops_immediately(make_graph):
    graph = make_graph()
    before = graph.to_state()

    result = LabelMinimizer(graph, MinimizationConfig(max_iterations=0)).run()

    assert not result.is_minimal
    assert result.termination_reason is TerminationReason.MAX_ITERATIONS_REACHED
    assert not result.is_conclusive
    assert graph.to_state() == before


def test_cap_counts_moves():
    result = LabelMinimizer(cycling(), STATS.with_max_iterations(1)).run()

    assert result.termination_reason is TerminationReason.MAX_ITERATIONS_REACHED
    assert result.stats.iterations == 1
    assert result.stats.states_visited == 2


def test_cap_equal_to_moves_needed():
    result = LabelMinimizer(cycling(), STATS.with_max_iterations(2)).run()
    assert result.termination_reason is TerminationReason.CYCLE_DETECTED


def test_unbounded():
    config = MinimizationConfig(max_iterations=0).unlimited_iterations()
    assert config.max_iterations is None
    assert LabelMinimizer(cycling(), config).run().is_minimal


# =============================================================================
# DEFENSIVE ABORTS
# =============================================================================

def test_missing_incident_label_is_invariant_violation(monkeypatch):
    monkeypatch.setattr(minimizer_module, "find_min_incident_in_range", lambda graph, u, v: None)

    result = LabelMinimizer(stalling(), STATS).run()

    assert not result.is_minimal
    assert result.termination_reason is TerminationReason.INVARIANT_VIOLATION
    assert not result.is_conclusive
    assert "no incident label" in result.detail


class StickyGraph(TemporalGraph):
    """Refuses every label removal."""

    def remove_edge_timestamp(self, u, v, time):
        return False


def test_failed_removal_is_invariant_violation():
    graph = StickyGraph()
    for u, v, t in ((0, 1, 1), (0, 1, 3), (1, 2, 2)):
        graph.add_edge(u, v, t)

    result = LabelMinimizer(graph, STATS).run()

    assert result.termination_reason is TerminationReason.INVARIANT_VIOLATION
    assert "failed to remove label 1" in result.detail


# =============================================================================
# RESULT / RUN CONTRACT
# =============================================================================

def test_stats_absent_without_tracking():
    result = LabelMinimizer(cycling()).run()
    assert result.stats is None
    assert "stats" not in result.to_dict()


def test_result_to_dict():
    data = LabelMinimizer(cycling(), STATS).run().to_dict()
    assert data["is_minimal"] is True
    assert data["termination_reason"] == "CycleDetected"
    assert data["is_conclusive"] is True
    assert data["stats"]["iterations"] == 2
    assert "detail" not in data


def test_run_only_once():
    minimizer = LabelMinimizer(cycling())
    minimizer.run()
    with pytest.raises(RuntimeError):
        minimizer.run()


def test_deterministic():
    demo = [(0, 1, 7), (1, 2, 1), (1, 2, 4), (2, 3, 2), (2, 3, 5), (0, 3, 3), (0, 3, 6)]
    first, second = build(*demo), build(*reversed(demo))

    r1 = LabelMinimizer(first, STATS).run()
    r2 = LabelMinimizer(second, STATS).run()

    assert r1 == r2
    assert first.to_state() == second.to_state()


def test_convenience_wrappers():
    assert cycling().is_label_minimal()
    assert not stalling().is_label_minimal()

    result = stalling().is_label_minimal_with_config(STATS)
    assert result.stats.iterations == 1

    assert is_label_minimal(cycling()).termination_reason is TerminationReason.CYCLE_DETECTED


# =============================================================================
# LOGGING
# =============================================================================

def test_verbose_trace_at_info(caplog):
    with caplog.at_level(logging.INFO, logger="temporal_graph.minimizer"):
        LabelMinimizer(cycling(), MinimizationConfig().with_verbose()).run()
    assert "Cycle detected" in caplog.text
    assert "Iteration 2" in caplog.text


def test_quiet_trace_stays_at_debug(caplog):
    with caplog.at_level(logging.INFO, logger="temporal_graph.minimizer"):
        LabelMinimizer(cycling()).run()
    assert caplog.records == []


# =============================================================================
# CONFIGURATION
# =============================================================================

def test_config_defaults():
    config = MinimizationConfig()
    assert config.max_iterations == 10_000
    assert not config.track_statistics
    assert not config.verbose


def test_config_builders_copy():
    base = MinimizationConfig()
    tuned = base.with_max_iterations(5).with_statistics().with_verbose()
    assert (tuned.max_iterations, tuned.track_statistics, tuned.verbose) == (5, True, True)
    assert base == MinimizationConfig()


def test_config_rejects_negative_cap():
    with pytest.raises(ValueError):
        MinimizationConfig(max_iterations=-1)


@pytest.mark.parametrize("environ, expected", [
    ({}, MinimizationConfig()),
    ({"TEMPORAL_GRAPH_MAX_ITERATIONS": "25"}, MinimizationConfig(max_iterations=25)),
    ({"TEMPORAL_GRAPH_MAX_ITERATIONS": "None"}, MinimizationConfig(max_iterations=None)),
    ({"TEMPORAL_GRAPH_MAX_ITERATIONS": "unbounded", "TEMPORAL_GRAPH_TRACK_STATS": "yes"},
     MinimizationConfig(max_iterations=None, track_statistics=True)),
    ({"TEMPORAL_GRAPH_VERBOSE": "1", "TEMPORAL_GRAPH_TRACK_STATS": "0"},
     MinimizationConfig(verbose=True)),
])
def test_config_from_env(environ, expected):
    assert MinimizationConfig.from_env(environ) == expected


def test_config_from_env_rejects_garbage():
    with pytest.raises(ValueError):
        MinimizationConfig.from_env({"TEMPORAL_GRAPH_MAX_ITERATIONS": "lots"})
