"""
formats.py — Text Formats for Temporal Graphs and Multigraphs

Temporal graph, one per line:
  <n> <m> {u v k t1 .. tk}*

  n: vertex count (vertices 0..n-1 are always created)
  m: label count (informational, not checked)
  each edge block gives k labels of edge {u, v}

Multigraph, one per line:
  <n> <m> {u v mult}*

Expanding a multigraph assigns every permutation of 1..M (M = total
multiplicity) to its edge slots, producing M! temporal graph lines.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Tuple, Union

from .graph import TemporalGraph
from .types import TimeStep

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class ParseError(ValueError):
    """Raised when a graph line does not follow the text format."""
    pass


def _parse_int(token: str, what: str, position: int) -> int:
    try:
        return int(token)
    except ValueError:
        raise ParseError(f"Invalid {what} at position {position}: {token!r}")


def _parse_count(token: str, what: str, position: int) -> int:
    value = _parse_int(token, what, position)
    if value < 0:
        raise ParseError(f"Invalid {what} at position {position}: {token!r}")
    return value


# =============================================================================
# TEMPORAL GRAPH LINES
# =============================================================================

def parse_temporal_graph_line(line: str) -> TemporalGraph:
    parts = line.split()
    if len(parts) < 2:
        raise ParseError("Line too short")

    n_vertices = _parse_count(parts[0], "number of vertices", 0)
    _parse_count(parts[1], "number of edges", 1)

    graph = TemporalGraph()
    for vertex in range(n_vertices):
        graph.add_vertex(vertex)

    idx = 2
    while idx < len(parts):
        if idx + 2 >= len(parts):
            raise ParseError(f"Incomplete edge data at position {idx}")

        u = _parse_count(parts[idx], "vertex u", idx)
        v = _parse_count(parts[idx + 1], "vertex v", idx + 1)
        k = _parse_count(parts[idx + 2], "timestamp count", idx + 2)

        if idx + 2 + k >= len(parts):
            raise ParseError(f"Not enough timestamps for edge ({u}, {v})")

        for i in range(k):
            pos = idx + 3 + i
            graph.add_edge(u, v, _parse_int(parts[pos], "timestamp", pos))

        idx += 3 + k

    return graph


def format_temporal_graph_line(graph: TemporalGraph) -> str:
    """Inverse of parse_temporal_graph_line (n = max vertex id + 1)."""
    vertices = graph.vertices()
    n_vertices = vertices[-1] + 1 if vertices else 0

    tokens = [str(n_vertices), str(graph.label_count)]
    for (u, v), times in graph.iter_edges():
        tokens.extend([str(u), str(v), str(len(times))])
        tokens.extend(str(t) for t in times)
    return " ".join(tokens)


def iter_temporal_graphs(path: PathLike) -> Iterator[TemporalGraph]:
    """Lazily parse a file of temporal graph lines, skipping blank lines."""
    with open(path, "r", encoding="utf-8") as f:
        for line_num, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                yield parse_temporal_graph_line(line)
            except ParseError as e:
                raise ParseError(f"Line {line_num}: {e}")


def read_temporal_graphs(path: PathLike) -> List[TemporalGraph]:
    logger.info("Reading temporal graphs from %s", path)
    graphs = list(iter_temporal_graphs(path))
    logger.info("Read %d temporal graphs", len(graphs))
    return graphs


def write_temporal_graphs(path: PathLike, graphs: Iterable[TemporalGraph]) -> int:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for graph in graphs:
            f.write(format_temporal_graph_line(graph) + "\n")
            count += 1
    return count


# =============================================================================
# MULTIGRAPHS
# =============================================================================

@dataclass
class Multigraph:
    """Edge multiplicities of one multigraph line."""
    num_vertices: int
    # (u, v, multiplicity)
    edges: List[Tuple[int, int, int]] = field(default_factory=list)

    @classmethod
    def parse(cls, line: str) -> "Multigraph":
        parts = line.split()
        if len(parts) < 2:
            raise ParseError("Line too short")

        num_vertices = _parse_count(parts[0], "number of vertices", 0)

        edges = []
        idx = 2
        while idx + 2 < len(parts):
            u = _parse_count(parts[idx], "vertex u", idx)
            v = _parse_count(parts[idx + 1], "vertex v", idx + 1)
            mult = _parse_count(parts[idx + 2], "multiplicity", idx + 2)
            edges.append((u, v, mult))
            idx += 3

        return cls(num_vertices=num_vertices, edges=edges)

    @property
    def total_edges(self) -> int:
        return sum(mult for _, _, mult in self.edges)

    def to_temporal_line(self, timestamps: Sequence[TimeStep]) -> str:
        """Give each edge the next `mult` timestamps, in edge order."""
        if len(timestamps) < self.total_edges:
            raise ValueError(f"Need {self.total_edges} timestamps, got {len(timestamps)}")

        tokens = [str(self.num_vertices), str(self.total_edges)]
        pos = 0
        for u, v, mult in self.edges:
            tokens.extend([str(u), str(v), str(mult)])
            tokens.extend(str(t) for t in timestamps[pos:pos + mult])
            pos += mult
        return " ".join(tokens)


def expand_multigraph(multigraph: Multigraph) -> Iterator[str]:
    """One temporal graph line per permutation of 1..M."""
    timestamps = range(1, multigraph.total_edges + 1)
    for perm in itertools.permutations(timestamps):
        yield multigraph.to_temporal_line(perm)


def generate_temporal_graphs_from_multigraphs(input_file: PathLike, output_file: PathLike) -> int:
    """
    Expand every multigraph of `input_file` into `output_file`.

    All lines must share the same total multiplicity M (taken from the first
    valid line). Returns the number of temporal graphs written.
    """
    logger.info("Generating temporal graphs: %s -> %s", input_file, output_file)

    with open(input_file, "r", encoding="utf-8") as f:
        lines = [(num, line) for num, line in enumerate(f, start=1) if line.strip()]

    total_edges = None
    for _, line in lines:
        try:
            total_edges = Multigraph.parse(line).total_edges
            break
        except ParseError:
            continue
    if total_edges is None:
        raise ParseError("No valid multigraphs in input file")
    if total_edges == 0:
        raise ParseError("Multigraphs have no edges")

    logger.info("Total edges per graph: %d (%d multigraphs)", total_edges, len(lines))

    # every line is checked before the output file is created
    multigraphs = []
    for line_num, line in lines:
        try:
            multigraph = Multigraph.parse(line)
        except ParseError as e:
            raise ParseError(f"Line {line_num}: {e}")
        if multigraph.total_edges != total_edges:
            raise ParseError(
                f"Line {line_num}: total multiplicity {multigraph.total_edges} != {total_edges}"
            )
        multigraphs.append((line_num, multigraph))

    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    generated = 0
    with open(output_file, "w", encoding="utf-8") as out:
        for line_num, multigraph in multigraphs:
            count = 0
            for temporal_line in expand_multigraph(multigraph):
                out.write(temporal_line + "\n")
                count += 1
            logger.debug("Multigraph %d -> %d temporal graphs", line_num, count)
            generated += count

    logger.info("Total temporal graphs generated: %d", generated)
    return generated
