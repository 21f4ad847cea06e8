"""Turn a route into a chain of projections over a lazy query."""

from __future__ import annotations

import logging
from typing import Any, Protocol, TypeVar, runtime_checkable

from .graph_builder import EntityNode
from .route import Route

logger = logging.getLogger(__name__)

Q = TypeVar("Q")


@runtime_checkable
class Projector(Protocol[Q]):
    """Appends one navigation projection to a lazy query.

    ``project`` must return a query over ``target`` rows whose elements are
    the values of ``navigation`` on each ``source`` element. It must never
    execute the query, and raises ``NoNavigationFound`` when the navigation
    cannot be resolved against the live type.
    """

    def project(self, query: Q, source: EntityNode, navigation: str, target: EntityNode) -> Q:
        ...


def compose(route: Route, query: Any, projector: Projector) -> Any:
    """Project ``query`` along every hop of ``route``.

    A route with a single step leaves the query untouched; a route of n hops
    appends exactly n projections.
    """

    if route.is_identity:
        return query

    for step, following in route.hops():
        logger.debug("Projecting %s.%s -> %s", step.node.name, step.navigation, following.node.name)
        query = projector.project(query, step.node, step.navigation, following.node)
    return query
