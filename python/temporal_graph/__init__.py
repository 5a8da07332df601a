"""
Temporal Graph
==============

Label-minimality of temporal graphs under the wrap/transfer rewriting
system:
  - TemporalGraph: undirected graph whose edges carry sets of timestamps
  - GraphState: canonical, order-independent snapshot (cycle detection key)
  - operators: wrappable-edge search, minimum incident label, label transfer
  - LabelMinimizer: rewriting loop with cycle detection and a verdict

Text I/O, nauty-based enumeration, DOT export, a CLI and an MCP server sit
around that core.
"""

from .types import EdgeKey, GraphState, IncidentLabel, TimeStep, VertexId, normalize_pair
from .graph import TemporalGraph
from .operators import (
    find_min_incident_in_range,
    find_wrappable_edge,
    transfer_labels_through_edge,
)
from .minimizer import (
    LabelMinimizer,
    MinimizationConfig,
    MinimizationResult,
    MinimizationStats,
    TerminationReason,
    is_label_minimal,
)
from .formats import (
    Multigraph,
    ParseError,
    format_temporal_graph_line,
    generate_temporal_graphs_from_multigraphs,
    parse_temporal_graph_line,
    read_temporal_graphs,
)
from .nauty import NautyError, generate_multigraphs_nauty
from .export import RenderError, to_dot, to_dot_at_time, to_summary

__version__ = "0.3.0"
__all__ = [
    # Data model
    "TemporalGraph",
    "GraphState",
    "IncidentLabel",
    "EdgeKey",
    "TimeStep",
    "VertexId",
    "normalize_pair",
    # Rewriting kernels
    "find_wrappable_edge",
    "find_min_incident_in_range",
    "transfer_labels_through_edge",
    # Minimization
    "LabelMinimizer",
    "MinimizationConfig",
    "MinimizationResult",
    "MinimizationStats",
    "TerminationReason",
    "is_label_minimal",
    # Text formats / enumeration
    "Multigraph",
    "ParseError",
    "parse_temporal_graph_line",
    "format_temporal_graph_line",
    "read_temporal_graphs",
    "generate_temporal_graphs_from_multigraphs",
    "NautyError",
    "generate_multigraphs_nauty",
    # Export
    "RenderError",
    "to_dot",
    "to_dot_at_time",
    "to_summary",
]
