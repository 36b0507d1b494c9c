#!/usr/bin/env python3
"""
CLI tool to score concept pairs in a taxonomy.

Example:
    taxosim score --edges taxonomy.jsonl dog cat --all --max-depth auto
"""

import argparse
import json
import sys
import time
from pathlib import Path

from taxosim.diagnostics import describe_taxonomy
from taxosim.hirst_st_onge import (
    DEFAULT_C,
    DEFAULT_K,
    DEFAULT_MAX_LENGTH,
    find_best_chain,
)
from taxosim.loader import TaxonomyLoadError, build_graph_from_jsonl
from taxosim.measures import MEASURES, MeasureOptions, compute_all_measures, get_measure
from taxosim.traversal import bfs_shortest_path, find_lcas, max_taxonomy_depth


def _add_graph_arguments(parser):
    parser.add_argument(
        "--edges", "-g", required=True, type=Path, help="Path to edges JSONL file"
    )
    parser.add_argument(
        "--nodes", type=Path, help="Path to nodes JSONL file (optional)"
    )
    parser.add_argument(
        "--predicates",
        nargs="+",
        help="Only traverse edges with these predicates",
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Suppress progress output"
    )


def _load_graph(args):
    """Load the taxonomy or exit with an error message."""
    for path in (args.edges, args.nodes):
        if path is not None and not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            sys.exit(1)

    try:
        return build_graph_from_jsonl(
            args.edges, args.nodes, verbose=not args.quiet
        )
    except (OSError, TaxonomyLoadError) as e:
        print(f"Error loading taxonomy: {e}", file=sys.stderr)
        sys.exit(1)


def _measure_options(args, graph):
    max_depth = args.max_depth
    if max_depth == "auto":
        max_depth = max_taxonomy_depth(graph, args.predicates)
        if not args.quiet:
            print(f"Derived max depth: {max_depth}")
    elif max_depth is not None:
        try:
            max_depth = float(max_depth)
        except ValueError:
            print("Error: --max-depth must be a number or 'auto'", file=sys.stderr)
            sys.exit(1)

    try:
        return MeasureOptions.coerce({
            "predicates": args.predicates,
            "max_depth": max_depth,
            "C": args.C,
            "k": args.k,
            "max_length": args.max_length,
        })
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def score_command(args):
    graph = _load_graph(args)
    options = _measure_options(args, graph)

    start_time = time.time()
    if args.all:
        scores = compute_all_measures(graph, args.concept1, args.concept2, options)
    else:
        measure = get_measure(args.measure)
        scores = {args.measure: measure(graph, args.concept1, args.concept2, options)}
    elapsed = time.time() - start_time

    if args.output:
        output_data = {
            "query": {
                "concept1": args.concept1,
                "concept2": args.concept2,
                "predicates": args.predicates,
                "max_depth": options.max_depth,
            },
            "elapsed_seconds": elapsed,
            "scores": scores,
        }
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w") as f:
            json.dump(output_data, f, indent=2)
        if not args.quiet:
            print(f"Results saved to {args.output}")
    else:
        if not args.quiet:
            print(f"\n{args.concept1} ↔ {args.concept2}")
            print("-" * 60)
        for name, score in scores.items():
            print(f"{name}: {score:.6g}")


def path_command(args):
    graph = _load_graph(args)
    options = _measure_options(args, graph)

    path = bfs_shortest_path(graph, args.concept1, args.concept2, options.predicates)
    lcas = find_lcas(graph, args.concept1, args.concept2, options.predicates)
    chain = find_best_chain(
        graph, args.concept1, args.concept2, options.hirst_st_onge_config()
    )

    names = graph.node_names((path or []) + lcas + (chain.path or []))

    def label(node_id):
        name = names.get(node_id)
        return f"{name} ({node_id})" if name and name != node_id else node_id

    if path is None:
        print("Shortest path: none")
    else:
        print(
            f"Shortest path ({len(path) - 1} edges): {' → '.join(map(label, path))}"
        )
    print(f"Common ancestors: {', '.join(map(label, lcas)) if lcas else 'none'}")
    if chain.path is None:
        print("Best chain: none")
    else:
        print(
            f"Best chain (score {chain.score:g}, {chain.changes} changes): "
            f"{' → '.join(map(label, chain.path))}"
        )


def diagnose_command(args):
    graph = _load_graph(args)
    describe_taxonomy(graph, predicates=args.predicates)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Semantic similarity over is-a taxonomies",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single measure
  taxosim score --edges taxonomy.jsonl dog cat --measure wu_palmer

  # Every measure, deriving D from the taxonomy
  taxosim score --edges taxonomy.jsonl dog cat --all --max-depth auto

  # Restrict traversal to is-a edges
  taxosim path --edges taxonomy.jsonl dog penguin --predicates is-a

  # Summarize the taxonomy
  taxosim diagnose --edges taxonomy.jsonl
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    score = subparsers.add_parser("score", help="Score a concept pair")
    _add_graph_arguments(score)
    score.add_argument("concept1", help="First concept ID")
    score.add_argument("concept2", help="Second concept ID")
    score.add_argument(
        "--measure",
        "-m",
        choices=sorted(MEASURES),
        default="rada_similarity",
        help="Measure to compute (default: rada_similarity)",
    )
    score.add_argument("--all", action="store_true", help="Compute every measure")
    score.add_argument(
        "--output", "-o", type=Path, help="Output JSON file for results"
    )

    path = subparsers.add_parser(
        "path", help="Show the paths and ancestors behind a score"
    )
    _add_graph_arguments(path)
    path.add_argument("concept1", help="First concept ID")
    path.add_argument("concept2", help="Second concept ID")

    for sub in (score, path):
        sub.add_argument(
            "--max-depth",
            help="Taxonomy depth D for resnik_edge/leacock_chodorow, or 'auto'",
        )
        sub.add_argument("--C", type=float, default=DEFAULT_C, help="Hirst-St-Onge C")
        sub.add_argument("--k", type=float, default=DEFAULT_K, help="Hirst-St-Onge k")
        sub.add_argument(
            "--max-length",
            type=int,
            default=DEFAULT_MAX_LENGTH,
            help=f"Hirst-St-Onge path length cap (default: {DEFAULT_MAX_LENGTH})",
        )

    diagnose = subparsers.add_parser("diagnose", help="Summarize a taxonomy")
    _add_graph_arguments(diagnose)

    args = parser.parse_args(argv)

    if args.command == "score":
        score_command(args)
    elif args.command == "path":
        path_command(args)
    elif args.command == "diagnose":
        diagnose_command(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
