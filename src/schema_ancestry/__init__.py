"""Shortest foreign-key routes from child tables to their ancestors."""

from .errors import (
    CompositeKeyUnsupported,
    NoNavigationFound,
    NoRouteFound,
    SchemaAncestryError,
    TypeNotMapped,
)
from .metadata_loader import (
    RelationshipMetadata,
    TableMetadata,
    SchemaMetadata,
    load_schema_metadata,
)
from .graph_builder import EntityNode, SchemaGraph, build_schema_graph, summarize_graph
from .route import Route, Step
from .route_finder import find_route
from .query_composer import Projector, compose
from .finder import ParentFinder, QuerySource, find_parent
from .exporter import export_schema_pack

__all__ = [
    "CompositeKeyUnsupported",
    "NoNavigationFound",
    "NoRouteFound",
    "SchemaAncestryError",
    "TypeNotMapped",
    "RelationshipMetadata",
    "TableMetadata",
    "SchemaMetadata",
    "load_schema_metadata",
    "EntityNode",
    "SchemaGraph",
    "build_schema_graph",
    "summarize_graph",
    "Route",
    "Step",
    "find_route",
    "Projector",
    "compose",
    "ParentFinder",
    "QuerySource",
    "find_parent",
    "export_schema_pack",
]
