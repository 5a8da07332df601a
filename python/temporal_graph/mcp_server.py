"""
Temporal Graph MCP Server — Label Minimality for LLM Agents

This is the MCP (Model Context Protocol) interface to temporal_graph.
Every tool takes a graph in the one-line text format

    <n> <m> {u v k t1 .. tk}*

and answers with JSON text.

Usage:
    python -m temporal_graph.mcp_server

For Claude Desktop / Cursor, add to config:
    {
        "mcpServers": {
            "temporal-graph": {
                "command": "python",
                "args": ["-m", "temporal_graph.mcp_server"]
            }
        }
    }

Environment:
    TEMPORAL_GRAPH_MAX_ITERATIONS  default move cap (integer or "none")
"""
from __future__ import annotations

import json
import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from temporal_graph.export import to_dot, to_dot_at_time, to_summary
from temporal_graph.formats import ParseError, format_temporal_graph_line, parse_temporal_graph_line
from temporal_graph.minimizer import LabelMinimizer, MinimizationConfig
from temporal_graph.operators import find_min_incident_in_range, find_wrappable_edge

logger = logging.getLogger(__name__)

# Initialize MCP server
mcp = FastMCP("temporal-graph")


def _error(message: str) -> str:
    return json.dumps({"error": message})


# ============================================================================
# TOOLS — Actions that LLM can take
# ============================================================================

@mcp.tool()
def minimize_graph(
    graph_line: str,
    max_iterations: Optional[int] = None,
    unbounded: bool = False,
) -> str:
    """
    DECIDE: Run the wrap/transfer rewriting loop and report label-minimality.

    Args:
        graph_line: Temporal graph in text format, e.g. "3 4 0 1 2 1 3 0 2 1 3 1 2 1 2"
        max_iterations: Move cap (default from TEMPORAL_GRAPH_MAX_ITERATIONS or 10000)
        unbounded: Ignore any cap (may not terminate on large graphs)

    Returns:
        JSON with is_minimal, termination_reason, is_conclusive, stats,
        and the final graph line after the moves were applied.
    """
    try:
        graph = parse_temporal_graph_line(graph_line)
        config = MinimizationConfig.from_env().with_statistics()
        if unbounded:
            config = config.unlimited_iterations()
        elif max_iterations is not None:
            config = config.with_max_iterations(max_iterations)
    except (ParseError, ValueError) as e:
        return _error(str(e))

    result = LabelMinimizer(graph, config).run()
    logger.info("minimize_graph: %s after %d moves", result.termination_reason.value, result.stats.iterations)

    payload = result.to_dict()
    payload["final_graph"] = format_temporal_graph_line(graph)
    return json.dumps(payload, indent=2)


@mcp.tool()
def find_move(graph_line: str) -> str:
    """
    INSPECT: Show the next move the minimizer would make, without applying it.

    Args:
        graph_line: Temporal graph in text format

    Returns:
        JSON with the wrappable edge, its label range and the incident label
        (neighbor, common vertex, time), or "wrappable_edge": null.
    """
    try:
        graph = parse_temporal_graph_line(graph_line)
    except ParseError as e:
        return _error(str(e))

    edge = find_wrappable_edge(graph)
    if edge is None:
        return json.dumps({"wrappable_edge": None}, indent=2)

    u, v = edge
    tmin, tmax = graph.get_edge_time_range(u, v)
    incident = find_min_incident_in_range(graph, u, v)
    return json.dumps({
        "wrappable_edge": [u, v],
        "range": [tmin, tmax],
        "incident": incident._asdict() if incident else None,
    }, indent=2)


@mcp.tool()
def check_connected(graph_line: str) -> str:
    """
    INSPECT: Check whether the underlying (any-time) graph is connected.

    Args:
        graph_line: Temporal graph in text format

    Returns:
        JSON with connected flag, vertex/edge/label counts and a text summary.
    """
    try:
        graph = parse_temporal_graph_line(graph_line)
    except ParseError as e:
        return _error(str(e))

    return json.dumps({
        "connected": graph.is_connected(),
        "vertices": graph.vertex_count(),
        "edges": graph.edge_count(),
        "labels": graph.label_count,
        "summary": to_summary(graph),
    }, indent=2)


@mcp.tool()
def graph_to_dot(graph_line: str, time: Optional[int] = None) -> str:
    """
    RENDER: Graphviz DOT source for a temporal graph.

    Args:
        graph_line: Temporal graph in text format
        time: If given, only the edges active at this timestamp

    Returns:
        JSON with the DOT source.
    """
    try:
        graph = parse_temporal_graph_line(graph_line)
    except ParseError as e:
        return _error(str(e))

    dot = to_dot(graph) if time is None else to_dot_at_time(graph, time)
    return json.dumps({"dot": dot})


# ============================================================================
# MAIN
# ============================================================================

def main():
    """Run the MCP server."""
    mcp.run(transport='stdio')


if __name__ == "__main__":
    main()
