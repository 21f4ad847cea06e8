"""Command line interface for schema-ancestry."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from .errors import SchemaAncestryError
from .exporter import describe_tables, export_schema_pack
from .graph_builder import SchemaGraph, build_schema_graph
from .metadata_loader import load_schema_metadata
from .route_finder import find_route

DEFAULT_SCHEMA = os.environ.get("SCHEMA_ANCESTRY_SCHEMA")
DEFAULT_LOG_LEVEL = os.environ.get("SCHEMA_ANCESTRY_LOG_LEVEL", "WARNING")

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Find ancestor routes across foreign keys")
    parser.add_argument(
        "--schema",
        type=Path,
        default=Path(DEFAULT_SCHEMA) if DEFAULT_SCHEMA else None,
        help="Path to a JSON schema description (defaults to $SCHEMA_ANCESTRY_SCHEMA)",
    )
    parser.add_argument(
        "--log-level",
        default=DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Logging verbosity",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("inspect", help="Inspect tables and their principals")

    route_parser = subparsers.add_parser("route", help="Show the shortest route from a child to a parent")
    route_parser.add_argument("--child", required=True, help="Child table name")
    route_parser.add_argument("--parent", required=True, help="Parent (ancestor) table name")
    route_parser.add_argument("--json", action="store_true", help="Print the route as JSON")

    graph_parser = subparsers.add_parser("build-graph", help="Build the foreign-key graph")
    graph_parser.add_argument(
        "--output",
        type=Path,
        help="Optional path to store the graph as JSON (node-link format)",
    )

    export_parser = subparsers.add_parser("export-pack", help="Export graph, tables and summary JSON")
    export_parser.add_argument(
        "--output-dir",
        type=Path,
        required=True,
        help="Destination directory for the schema pack",
    )

    args = parser.parse_args(argv)
    if args.schema is None:
        parser.error("--schema is required when SCHEMA_ANCESTRY_SCHEMA is not set")
    return args


def cmd_inspect(graph: SchemaGraph) -> None:
    summary = graph.summarize()
    print(f"Schema: {graph.name}")
    print(f"  Tables: {summary['tables']}")
    print(f"  Foreign keys: {summary['foreign_keys']}")
    for table in describe_tables(graph):
        principals = ", ".join(f"{p['navigation']} -> {p['table']}" for p in table["principals"])
        print(f"    - {table['name']} [{', '.join(table['primary_key'])}]: {principals or '(root)'}")


def cmd_route(graph: SchemaGraph, child: str, parent: str, as_json: bool) -> None:
    route = find_route(
        graph,
        graph.entity(child, role="child type"),
        graph.entity(parent, role="parent type"),
    )
    if as_json:
        print(json.dumps(route.to_dict(), indent=2))
    else:
        print(f"{route.describe()} ({len(route)} hop(s))")


def cmd_build_graph(graph: SchemaGraph, output: Path | None) -> None:
    print(json.dumps(graph.summarize(), indent=2))

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as f:
            json.dump(graph.to_node_link(), f, indent=2)
        print(f"Graph saved to {output}")


def cmd_export_pack(graph: SchemaGraph, output_dir: Path) -> None:
    outputs = export_schema_pack(graph, output_dir)
    print(f"Schema pack exported to {output_dir}")
    for kind, path in outputs.items():
        print(f"  - {kind}: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        graph = build_schema_graph(load_schema_metadata(args.schema))

        if args.command == "inspect":
            cmd_inspect(graph)
        elif args.command == "route":
            cmd_route(graph, args.child, args.parent, args.json)
        elif args.command == "build-graph":
            cmd_build_graph(graph, args.output)
        elif args.command == "export-pack":
            cmd_export_pack(graph, args.output_dir)
        else:
            raise ValueError(f"Unknown command: {args.command}")
    except (SchemaAncestryError, FileNotFoundError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
