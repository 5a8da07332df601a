"""
test_formats.py — Text formats, multigraph expansion
"""

import logging
import math

import pytest
from temporal_graph import TemporalGraph
from temporal_graph.formats import (
    Multigraph,
    ParseError,
    expand_multigraph,
    format_temporal_graph_line,
    generate_temporal_graphs_from_multigraphs,
    iter_temporal_graphs,
    parse_temporal_graph_line,
    read_temporal_graphs,
    write_temporal_graphs,
)


# =============================================================================
# TEMPORAL GRAPH LINES
# =============================================================================

class TestParseTemporalLine:

    def test_basic(self):
        graph = parse_temporal_graph_line("4 4 0 1 2 0 10 1 2 1 5 2 3 1 7")
        assert graph.vertices() == [0, 1, 2, 3]
        assert graph.edge_times(0, 1) == [0, 10]
        assert graph.edge_times(1, 2) == [5]
        assert graph.edge_times(2, 3) == [7]

    def test_isolated_vertices_created(self):
        graph = parse_temporal_graph_line("5 1 0 1 1 3")
        assert graph.vertex_count() == 5
        assert graph.edge_count() == 1

    def test_no_edges(self):
        graph = parse_temporal_graph_line("3 0")
        assert graph.vertex_count() == 3
        assert graph.edge_count() == 0

    def test_zero_label_block(self):
        graph = parse_temporal_graph_line("3 1 0 1 0 1 2 1 4")
        assert graph.edge_times(0, 1) is None
        assert graph.edge_times(1, 2) == [4]

    def test_negative_timestamps(self):
        graph = parse_temporal_graph_line("2 2 0 1 2 -5 5")
        assert graph.edge_times(0, 1) == [-5, 5]

    @pytest.mark.parametrize("line, message", [
        ("", "too short"),
        ("3", "too short"),
        ("x 1", "number of vertices"),
        ("3 y", "number of edges"),
        ("3 1 0 1", "Incomplete edge data"),
        ("3 1 0 1 3 4 5", "Not enough timestamps"),
        ("3 1 a 1 1 4", "vertex u"),
        ("3 1 0 b 1 4", "vertex v"),
        ("3 1 0 1 c 4", "timestamp count"),
        ("3 1 0 1 1 z", "timestamp"),
        ("-1 0", "number of vertices"),
    ])
    def test_errors(self, line, message):
        with pytest.raises(ParseError, match=message):
            parse_temporal_graph_line(line)

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_temporal_graph_line("nope")


def test_format_line():
    graph = TemporalGraph()
    graph.add_edge(2, 1, 9)
    graph.add_edge(1, 0, 4)
    graph.add_edge(0, 1, 3)
    assert format_temporal_graph_line(graph) == "3 3 0 1 2 3 4 1 2 1 9"


def test_format_then_parse_keeps_state():
    line = "4 5 0 3 2 6 3 1 2 2 1 4 2 3 1 5 0 1 0"
    graph = parse_temporal_graph_line(line)
    again = parse_temporal_graph_line(format_temporal_graph_line(graph))
    assert again.to_state() == graph.to_state()
    assert again.vertices() == graph.vertices()


# =============================================================================
# FILES
# =============================================================================

def test_read_file_skips_blank_lines(tmp_path, caplog):
    path = tmp_path / "graphs.txt"
    path.write_text("2 1 0 1 1 5\n\n   \n3 2 0 1 1 1 1 2 1 2\n")

    with caplog.at_level(logging.INFO, logger="temporal_graph.formats"):
        graphs = read_temporal_graphs(path)

    assert len(graphs) == 2
    assert graphs[1].edge_times(1, 2) == [2]
    assert "Read 2 temporal graphs" in caplog.text


def test_read_file_reports_line_number(tmp_path):
    path = tmp_path / "graphs.txt"
    path.write_text("2 1 0 1 1 5\n\n2 1 0 1\n")
    with pytest.raises(ParseError, match="Line 3"):
        read_temporal_graphs(path)


def test_iter_is_lazy(tmp_path):
    path = tmp_path / "graphs.txt"
    path.write_text("2 1 0 1 1 5\nbroken\n")
    graphs = iter_temporal_graphs(path)
    assert next(graphs).edge_times(0, 1) == [5]
    with pytest.raises(ParseError):
        next(graphs)


def test_write_then_read(tmp_path):
    first = parse_temporal_graph_line("2 2 0 1 2 1 3")
    second = parse_temporal_graph_line("3 2 0 2 1 4 1 2 1 6")
    path = tmp_path / "out" / "graphs.txt"

    assert write_temporal_graphs(path, [first, second]) == 2
    back = read_temporal_graphs(path)
    assert [g.to_state() for g in back] == [first.to_state(), second.to_state()]


# =============================================================================
# MULTIGRAPHS
# =============================================================================

def test_multigraph_parse():
    mg = Multigraph.parse("3 2 0 1 2 1 2 1")
    assert mg.num_vertices == 3
    assert mg.edges == [(0, 1, 2), (1, 2, 1)]
    assert mg.total_edges == 3


def test_multigraph_parse_errors():
    with pytest.raises(ParseError):
        Multigraph.parse("3")
    with pytest.raises(ParseError, match="multiplicity"):
        Multigraph.parse("3 2 0 1 x")


def test_multigraph_to_temporal_line():
    mg = Multigraph.parse("3 2 0 1 2 1 2 1")
    line = mg.to_temporal_line([3, 1, 2])
    assert line == "3 3 0 1 2 3 1 1 2 1 2"

    graph = parse_temporal_graph_line(line)
    assert graph.edge_times(0, 1) == [1, 3]
    assert graph.edge_times(1, 2) == [2]


def test_multigraph_needs_enough_timestamps():
    with pytest.raises(ValueError):
        Multigraph.parse("3 2 0 1 2 1 2 1").to_temporal_line([1, 2])


def test_expand_multigraph_all_permutations():
    mg = Multigraph.parse("3 2 0 1 2 1 2 1")
    lines = list(expand_multigraph(mg))

    assert len(lines) == math.factorial(3)
    assert len(set(lines)) == len(lines)
    assert lines[0] == "3 3 0 1 2 1 2 1 2 1 3"


def test_generate_from_file(tmp_path, caplog):
    source = tmp_path / "multi.txt"
    source.write_text("3 2 0 1 2 1 2 1\n\n3 2 0 1 1 1 2 2\n")
    target = tmp_path / "temporal.txt"

    with caplog.at_level(logging.INFO, logger="temporal_graph.formats"):
        count = generate_temporal_graphs_from_multigraphs(source, target)

    assert count == 12
    graphs = read_temporal_graphs(target)
    assert len(graphs) == 12
    assert all(g.label_count == 3 for g in graphs)
    assert "Total temporal graphs generated: 12" in caplog.text


def test_generate_rejects_empty_input(tmp_path):
    source = tmp_path / "multi.txt"
    source.write_text("\n\n")
    with pytest.raises(ParseError, match="No valid multigraphs"):
        generate_temporal_graphs_from_multigraphs(source, tmp_path / "out.txt")


def test_generate_rejects_edgeless_multigraphs(tmp_path):
    source = tmp_path / "multi.txt"
    source.write_text("3 0\n")
    with pytest.raises(ParseError, match="no edges"):
        generate_temporal_graphs_from_multigraphs(source, tmp_path / "out.txt")


def test_generate_rejects_mismatched_totals(tmp_path):
    source = tmp_path / "multi.txt"
    source.write_text("3 2 0 1 2 1 2 1\n3 2 0 1 1 1 2 1\n")
    with pytest.raises(ParseError, match="Line 2"):
        generate_temporal_graphs_from_multigraphs(source, tmp_path / "out.txt")


@pytest.mark.parametrize("second_line", [
    "3 2 0 1 x 1 2 1",
    "3 2 0 1 1 1 2 2",
])
def test_generate_writes_nothing_when_a_later_line_fails(tmp_path, second_line):
    source = tmp_path / "multi.txt"
    source.write_text(f"3 2 0 1 1 1 2 1\n{second_line}\n")
    target = tmp_path / "out" / "temporal.txt"

    with pytest.raises(ParseError, match="Line 2"):
        generate_temporal_graphs_from_multigraphs(source, target)
    assert not target.exists()
