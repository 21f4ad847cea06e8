"""Routes: ordered chains of foreign-key hops between two tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from .errors import NoNavigationFound
from .graph_builder import EntityNode, SchemaGraph


@dataclass(frozen=True)
class Step:
    """One table on a route plus the navigation that leads to the next table."""

    node: EntityNode
    navigation: Optional[str] = None


@dataclass(frozen=True)
class Route:
    steps: Tuple[Step, ...]

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError("A route needs at least one step")
        for step, following in zip(self.steps, self.steps[1:]):
            if not any(
                nav.name == step.navigation and nav.target == following.node.identity
                for nav in step.node.navigations
            ):
                raise NoNavigationFound(step.node.identity, following.node.identity, step.navigation)
        if self.steps[-1].navigation is not None:
            raise ValueError("The last step of a route cannot carry a navigation")

    @classmethod
    def build(cls, graph: SchemaGraph, nodes: Sequence[EntityNode]) -> "Route":
        """Chain ``nodes`` in order, naming each hop from the graph."""

        if not nodes:
            raise ValueError("A route needs at least one node")
        steps: List[Step] = []
        for current, following in zip(nodes, nodes[1:]):
            steps.append(Step(current, graph.navigation_name(current, following)))
        steps.append(Step(nodes[-1]))
        return cls(tuple(steps))

    @property
    def first(self) -> Step:
        return self.steps[0]

    @property
    def last(self) -> Step:
        return self.steps[-1]

    @property
    def is_identity(self) -> bool:
        return len(self.steps) == 1

    def __len__(self) -> int:
        """Number of hops, not steps."""
        return len(self.steps) - 1

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def hops(self) -> Iterator[Tuple[Step, Step]]:
        """Yield ``(step, next_step)`` for every hop, start to target."""
        return zip(self.steps, self.steps[1:])

    def nodes(self) -> List[EntityNode]:
        return [step.node for step in self.steps]

    def describe(self) -> str:
        parts = [self.first.node.name]
        for step, following in self.hops():
            parts.append(f"-[{step.navigation}]-> {following.node.name}")
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start": self.first.node.name,
            "target": self.last.node.name,
            "hops": len(self),
            "steps": [
                {"table": step.node.name, "navigation": step.navigation}
                for step in self.steps
            ],
        }
