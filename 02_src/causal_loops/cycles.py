"""Cycle search, sign-parity classification and rotation-aware comparison."""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, List, Optional, Sequence, Tuple

from .graph_model import Connector, LoopGraph, LoopNode, loop_kind
from .labels import is_negative_caption


@dataclass
class CycleSearchResult:
    """Outcome of a loop search; the classification is computed on first access."""

    found: bool
    path: List[LoopNode] = field(default_factory=list)

    @cached_property
    def is_reinforcing(self) -> bool:
        return self.found and is_reinforcing_cycle(self.path)

    @property
    def kind(self) -> str:
        return loop_kind(self.is_reinforcing)

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.path]


def find_cycle(
    graph: LoopGraph,
    start: LoopNode,
    current: Optional[LoopNode] = None,
    path: Optional[List[LoopNode]] = None,
    visited: Optional[Dict[str, bool]] = None,
) -> CycleSearchResult:
    """Depth-first search for the first loop leading back to ``start``.

    Connectors are followed in their snapshot order and the first loop that
    closes wins, which is not necessarily the shortest one. Every branch gets
    its own copy of ``path`` and ``visited`` so a dead end never hides nodes
    from its siblings. The returned path does not repeat ``start`` at the end.
    """
    current = start if current is None else current
    path = [] if path is None else path
    visited = {} if visited is None else visited

    visited[current.id] = True
    path.append(current)

    for connector in current.connectors:
        neighbour = graph.get(connector.target)
        if neighbour is None:
            continue

        if neighbour.id == start.id:
            return CycleSearchResult(found=True, path=path)

        if not visited.get(neighbour.id):
            branch = find_cycle(graph, start, neighbour, list(path), dict(visited))
            if branch.found:
                return branch

    return CycleSearchResult(found=False, path=path)


def _connector_between(node: LoopNode, neighbour: LoopNode) -> Optional[Connector]:
    return next((c for c in node.connectors if c.target == neighbour.id), None)


def count_negative_links(cycle: Sequence[LoopNode]) -> int:
    count = 0
    for index, node in enumerate(cycle):
        neighbour = cycle[(index + 1) % len(cycle)]
        connector = _connector_between(node, neighbour)
        if connector is not None and is_negative_caption(connector.caption):
            count += 1
    return count


def is_reinforcing_cycle(cycle: Sequence[LoopNode]) -> bool:
    """Even number of negative links reinforces, odd balances."""
    return count_negative_links(cycle) % 2 == 0


def cycle_edges(cycle: Sequence[LoopNode]) -> List[Tuple[str, str]]:
    return sorted(
        (node.id, cycle[(index + 1) % len(cycle)].id) for index, node in enumerate(cycle)
    )


def cycles_equivalent(left: Sequence[LoopNode], right: Sequence[LoopNode]) -> bool:
    """Same directed loop, possibly entered at a different node."""
    if len(left) != len(right):
        return False
    return cycle_edges(left) == cycle_edges(right)
