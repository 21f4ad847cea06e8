"""Shortest foreign-key route search between two tables.

Every foreign key costs one hop, so the search is Dijkstra's algorithm with
uniform weights (a breadth-first search in disguise). Among frontier tables
of equal cost, the one discovered first is expanded first, and principals
are relaxed in the order their relationships were declared. The resulting
route is therefore stable for an unchanged schema.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .errors import NoRouteFound
from .graph_builder import EntityNode, SchemaGraph
from .route import Route

logger = logging.getLogger(__name__)


@dataclass
class _SearchEntry:
    node: EntityNode
    cost: int
    frontier: bool
    predecessor: Optional[EntityNode]


def find_route(graph: SchemaGraph, start: EntityNode, target: EntityNode) -> Route:
    """Return a minimum-hop route from ``start`` to ``target``.

    Raises:
        NoRouteFound: no chain of foreign keys reaches ``target``.
        NoNavigationFound: a hop on the route has no navigation name.
    """

    if start.identity == target.identity:
        return Route.build(graph, [start])

    # Search state is local to this call; concurrent searches never share it.
    state: Dict[Any, _SearchEntry] = {
        start.identity: _SearchEntry(start, cost=0, frontier=True, predecessor=None)
    }
    current: Optional[_SearchEntry] = state[start.identity]

    while current is not None:
        principals = graph.principals(current.node)
        for principal in principals:
            cost = current.cost + 1
            known = state.get(principal.identity)
            if known is None:
                state[principal.identity] = _SearchEntry(
                    principal, cost=cost, frontier=True, predecessor=current.node
                )
            elif cost < known.cost:
                known.cost = cost
                known.predecessor = current.node
        current.frontier = False

        # The expanded table is the cheapest unexplored one, so a principal
        # discovered from it already carries its final cost.
        if any(principal.identity == target.identity for principal in principals):
            break
        current = _cheapest_frontier(state)
    else:
        logger.debug("Frontier exhausted after %d tables without reaching %s", len(state), target)
        raise NoRouteFound(start.identity, target.identity)

    route = Route.build(graph, _walk_back(state, target))
    logger.debug("Route found: %s", route.describe())
    return route


def _cheapest_frontier(state: Dict[Any, _SearchEntry]) -> Optional[_SearchEntry]:
    """Lowest-cost unexplored entry; ties go to the one discovered first."""
    frontier = [entry for entry in state.values() if entry.frontier]
    if not frontier:
        return None
    return min(frontier, key=lambda entry: entry.cost)


def _walk_back(state: Dict[Any, _SearchEntry], target: EntityNode) -> List[EntityNode]:
    nodes = [target]
    predecessor = state[target.identity].predecessor
    while predecessor is not None:
        nodes.append(predecessor)
        predecessor = state[predecessor.identity].predecessor
    nodes.reverse()
    return nodes
