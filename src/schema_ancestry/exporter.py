"""Export schema graphs and routes as JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

from .graph_builder import SchemaGraph


def export_schema_pack(graph: SchemaGraph, output_dir: Path) -> Dict[str, Path]:
    """Write graph + table summaries for offline inspection."""

    output_dir.mkdir(parents=True, exist_ok=True)

    graph_path = output_dir / "graph.json"
    with graph_path.open("w", encoding="utf-8") as f:
        json.dump(graph.to_node_link(), f, indent=2)

    tables_path = output_dir / "tables.json"
    with tables_path.open("w", encoding="utf-8") as f:
        json.dump(describe_tables(graph), f, indent=2)

    summary = {"schema": graph.name, "graph_stats": graph.summarize()}
    summary_path = output_dir / "summary.json"
    with summary_path.open("w", encoding="utf-8") as f:
        json.dump(summary, f, indent=2)

    return {
        "graph": graph_path,
        "tables": tables_path,
        "summary": summary_path,
    }


def describe_tables(graph: SchemaGraph) -> List[Dict[str, Any]]:
    tables = []
    for node in graph:
        tables.append(
            {
                "name": node.name,
                "primary_key": list(node.primary_key),
                "principals": [
                    {"table": principal.name, "navigation": graph.navigation_name(node, principal)}
                    for principal in graph.principals(node)
                ],
            }
        )
    return tables
