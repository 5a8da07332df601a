"""
cli.py — Command Line Interface

  temporal-graph minimize "<graph line>" | --file graphs.txt
  temporal-graph read graphs.txt
  temporal-graph expand multigraphs.txt temporal.txt
  temporal-graph nauty <n> <m> <M> multigraphs.txt
  temporal-graph dot "<graph line>" --output prefix [--time T] [--no-render]
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .export import RenderError, save_snapshot, save_with_labels, to_summary
from .formats import ParseError, generate_temporal_graphs_from_multigraphs, iter_temporal_graphs, parse_temporal_graph_line
from .minimizer import LabelMinimizer, MinimizationConfig
from .nauty import NautyError, generate_multigraphs_nauty

logger = logging.getLogger(__name__)

# Graphs printed by `read` before the rest is only counted
READ_PREVIEW = 5


def _config_from_args(args: argparse.Namespace) -> MinimizationConfig:
    config = MinimizationConfig.from_env()
    if args.unbounded:
        config = config.unlimited_iterations()
    elif args.max_iterations is not None:
        config = config.with_max_iterations(args.max_iterations)
    if args.stats:
        config = config.with_statistics()
    if args.verbose:
        config = config.with_verbose()
    return config


def cmd_minimize(args: argparse.Namespace) -> int:
    config = _config_from_args(args)

    if args.file:
        graphs = iter_temporal_graphs(args.file)
    elif args.graph:
        graphs = iter([parse_temporal_graph_line(args.graph)])
    else:
        raise ValueError("give a graph line or --file")

    n_minimal = 0
    for index, graph in enumerate(graphs, start=1):
        result = LabelMinimizer(graph, config).run()
        n_minimal += result.is_minimal

        if args.json:
            payload = result.to_dict()
            payload["index"] = index
            print(json.dumps(payload))
            continue

        print(f"Graph {index}: is_minimal={result.is_minimal} ({result.termination_reason.value})")
        if result.stats is not None:
            for name, value in result.stats.to_dict().items():
                print(f"  {name}: {value}")

    logger.info("%d minimal graphs", n_minimal)
    return 0


def cmd_read(args: argparse.Namespace) -> int:
    count = 0
    for count, graph in enumerate(iter_temporal_graphs(args.file), start=1):
        if count <= READ_PREVIEW:
            print(f"Graph {count}:")
            print(to_summary(graph))
            print()
    if count > READ_PREVIEW:
        print(f"... and {count - READ_PREVIEW} more graphs")
    print(f"Read {count} temporal graphs")
    return 0


def cmd_expand(args: argparse.Namespace) -> int:
    count = generate_temporal_graphs_from_multigraphs(args.input, args.output)
    print(f"Generated {count} temporal graphs")
    return 0


def cmd_nauty(args: argparse.Namespace) -> int:
    count = generate_multigraphs_nauty(args.n, args.m, args.big_m, args.output)
    print(f"Generated {count} multigraphs")
    return 0


def cmd_dot(args: argparse.Namespace) -> int:
    graph = parse_temporal_graph_line(args.graph)
    render = not args.no_render
    if args.time is None:
        path = save_with_labels(graph, args.output, render=render)
    else:
        path = save_snapshot(graph, args.time, args.output, render=render)
    print(f"Wrote {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="temporal-graph", description="Temporal graph label minimality")
    parser.add_argument('--verbose', '-v', action='store_true', help="log at INFO and trace every move")
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('minimize', help="decide label-minimality")
    p.add_argument('graph', nargs='?', help="graph line: <n> <m> {u v k t1..tk}*")
    p.add_argument('--file', '-f', help="file with one graph line per line")
    p.add_argument('--max-iterations', '-n', type=int)
    p.add_argument('--unbounded', action='store_true')
    p.add_argument('--stats', action='store_true')
    p.add_argument('--json', action='store_true')
    p.add_argument('--verbose', '-v', action='store_true', default=argparse.SUPPRESS)
    p.set_defaults(func=cmd_minimize)

    p = sub.add_parser('read', help="summarize a file of temporal graphs")
    p.add_argument('file')
    p.set_defaults(func=cmd_read)

    p = sub.add_parser('expand', help="multigraphs -> temporal graphs (all label permutations)")
    p.add_argument('input')
    p.add_argument('output')
    p.set_defaults(func=cmd_expand)

    p = sub.add_parser('nauty', help="generate multigraphs with geng | multig")
    p.add_argument('n', type=int)
    p.add_argument('m', type=int)
    p.add_argument('big_m', type=int, metavar='M')
    p.add_argument('output')
    p.set_defaults(func=cmd_nauty)

    p = sub.add_parser('dot', help="write DOT (and PNG) for a graph line")
    p.add_argument('graph')
    p.add_argument('--output', '-o', default='temporal_graph')
    p.add_argument('--time', '-t', type=int)
    p.add_argument('--no-render', action='store_true')
    p.set_defaults(func=cmd_dot)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except (ParseError, NautyError, RenderError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
