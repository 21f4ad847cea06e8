"""Find ancestor rows of a query without hand-writing the intermediate joins."""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

from .errors import CompositeKeyUnsupported
from .graph_builder import EntityNode, SchemaGraph, build_schema_graph
from .query_composer import Projector, compose
from .route import Route
from .route_finder import find_route

logger = logging.getLogger(__name__)


@runtime_checkable
class QuerySource(Protocol):
    """Creates the starting query for lookups by primary key."""

    def base_query(self, node: EntityNode) -> Any:
        ...

    def filter_by_key(self, query: Any, node: EntityNode, key_field: str, value: Any) -> Any:
        ...


class ParentFinder:
    """Resolves ancestor queries over one schema graph.

    The graph and projector are fixed at construction; every call builds its
    own search state, so one finder can serve concurrent callers.
    """

    def __init__(
        self,
        graph: SchemaGraph,
        projector: Projector,
        source: Optional[QuerySource] = None,
    ):
        self._graph = graph
        self._projector = projector
        if source is None and isinstance(projector, QuerySource):
            source = projector
        self._source = source

    @classmethod
    def from_models(cls, base: Any) -> "ParentFinder":
        """Build a finder for the classes mapped by a SQLAlchemy declarative base."""
        from .orm import SelectProjector, metadata_from_models

        graph = build_schema_graph(metadata_from_models(base))
        return cls(graph, SelectProjector())

    @property
    def graph(self) -> SchemaGraph:
        return self._graph

    def route(self, child_type: Any, parent_type: Any) -> Route:
        """Shortest route from ``child_type`` up to ``parent_type``."""

        child = self._child_entity(child_type)
        parent = self._graph.entity(parent_type, role="parent type")
        return find_route(self._graph, child, parent)

    def find_parent(self, child_type: Any, parent_type: Any, query: Any) -> Any:
        """Turn a lazy query over ``child_type`` into one over ``parent_type``.

        One row is produced per input row; ancestors shared by several
        children come back once per child.
        """

        child = self._child_entity(child_type)
        if child_type == parent_type:
            return query

        parent = self._graph.entity(parent_type, role="parent type")
        route = find_route(self._graph, child, parent)
        logger.debug("find_parent %s -> %s via %d hop(s)", child, parent, len(route))
        return compose(route, query, self._projector)

    def find_parent_by_id(self, child_type: Any, parent_type: Any, child_id: Any) -> Any:
        """Lazy query for the ancestor of the single child whose key equals ``child_id``."""

        if self._source is None:
            raise TypeError(
                f"{type(self._projector).__name__} cannot build base queries; pass a QuerySource"
            )

        child = self._child_entity(child_type)
        key_field = child.primary_key[0]
        if child.key_type is not None and not isinstance(child_id, child.key_type):
            raise TypeError(
                f"The child id {child_id!r} is not assignable to {child.name}.{key_field} "
                f"({child.key_type.__name__})."
            )

        query = self._source.filter_by_key(self._source.base_query(child), child, key_field, child_id)
        return self.find_parent(child_type, parent_type, query)

    def _child_entity(self, child_type: Any) -> EntityNode:
        child = self._graph.entity(child_type, role="child type")
        if len(child.primary_key) != 1:
            raise CompositeKeyUnsupported(child.identity, child.primary_key)
        return child


def find_parent(
    graph: SchemaGraph,
    projector: Projector,
    child_type: Any,
    parent_type: Any,
    query: Any,
) -> Any:
    """One-shot form of :meth:`ParentFinder.find_parent`."""
    return ParentFinder(graph, projector).find_parent(child_type, parent_type, query)
