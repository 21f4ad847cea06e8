"""Build NetworkX graphs of foreign-key relationships from schema metadata."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple

import networkx as nx
from networkx.readwrite import json_graph

from .errors import NoNavigationFound, TypeNotMapped
from .metadata_loader import RelationshipMetadata, SchemaMetadata

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntityNode:
    """A graph node standing for one mapped table/type."""

    identity: Any
    name: str
    primary_key: Tuple[str, ...] = ()
    navigations: Tuple[RelationshipMetadata, ...] = ()
    key_type: Optional[type] = None

    def __str__(self) -> str:
        return self.name


class SchemaGraph:
    """Read-only view of a schema as a directed graph of foreign keys.

    Edges point from the table holding the foreign key to the principal it
    references and carry the navigation name under ``rel``.
    """

    def __init__(self, graph: nx.DiGraph, name: str = "schema"):
        self._graph = graph if nx.is_frozen(graph) else nx.freeze(graph)
        self.name = name

    @property
    def graph(self) -> nx.DiGraph:
        return self._graph

    def __contains__(self, identity: Any) -> bool:
        return self.has_entity(identity)

    def __iter__(self) -> Iterator[EntityNode]:
        for _, attrs in self._graph.nodes(data=True):
            yield attrs["entity"]

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def has_entity(self, identity: Any) -> bool:
        try:
            return identity in self._graph
        except TypeError:
            # unhashable identities can never be mapped
            return False

    def entity(self, identity: Any, role: str = "type") -> EntityNode:
        if not self.has_entity(identity):
            raise TypeNotMapped(identity, role)
        return self._graph.nodes[identity]["entity"]

    def principals(self, node: EntityNode) -> List[EntityNode]:
        """Nodes one foreign-key hop away in the ancestor direction, in declaration order."""
        return [self._graph.nodes[target]["entity"] for target in self._graph.successors(node.identity)]

    def navigation_name(self, source: EntityNode, target: EntityNode) -> str:
        data = self._graph.get_edge_data(source.identity, target.identity)
        if not data:
            raise NoNavigationFound(source.identity, target.identity)
        return data["rel"]

    def summarize(self) -> Dict[str, int]:
        return summarize_graph(self._graph)

    def to_node_link(self) -> Dict[str, Any]:
        """Serialize the graph in networkx node-link form with JSON-safe attributes."""

        plain = nx.DiGraph(name=self.name)
        for node in self:
            plain.add_node(
                node.name,
                kind="table",
                primary_key=list(node.primary_key),
                key_type=node.key_type.__name__ if node.key_type else None,
            )
        for source, target, attrs in self._graph.edges(data=True):
            plain.add_edge(
                self._graph.nodes[source]["entity"].name,
                self._graph.nodes[target]["entity"].name,
                rel=attrs["rel"],
                weight=attrs["weight"],
            )
        return json_graph.node_link_data(plain)


def build_schema_graph(metadata: SchemaMetadata) -> SchemaGraph:
    """Create a frozen foreign-key graph for one schema."""

    G = nx.DiGraph(name=metadata.name)

    for table in metadata.tables.values():
        entity = EntityNode(
            identity=table.identity,
            name=table.name,
            primary_key=tuple(table.primary_key),
            navigations=tuple(table.relationships),
            key_type=table.key_type,
        )
        G.add_node(table.identity, entity=entity)

    _add_foreign_key_edges(G, metadata)

    graph = SchemaGraph(G, name=metadata.name)
    summary = graph.summarize()
    logger.info(
        "Built schema graph %s with %d tables and %d foreign keys",
        metadata.name,
        summary["tables"],
        summary["foreign_keys"],
    )
    return graph


def _add_foreign_key_edges(G: nx.DiGraph, metadata: SchemaMetadata) -> None:
    """Add one edge per child -> principal pair; the first declared navigation names it."""

    for table in metadata.tables.values():
        for rel in table.relationships:
            if rel.target not in G:
                logger.warning(
                    "Dropping relationship %s.%s: target %s is not a mapped table",
                    table.name,
                    rel.name,
                    rel.target,
                )
                continue
            if G.has_edge(table.identity, rel.target):
                logger.debug(
                    "Ignoring second navigation %s.%s to an already linked principal",
                    table.name,
                    rel.name,
                )
                continue
            G.add_edge(table.identity, rel.target, rel=rel.name, weight=1)


def summarize_graph(G: nx.DiGraph) -> Dict[str, int]:
    """Quick counts for graph contents."""

    return {
        "tables": G.number_of_nodes(),
        "foreign_keys": G.number_of_edges(),
        "roots": sum(1 for node in G.nodes if G.out_degree(node) == 0),
        "leaves": sum(1 for node in G.nodes if G.in_degree(node) == 0),
    }
