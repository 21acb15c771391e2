"""Whole-graph loop sweep and single-node loop lookup."""

import logging
from typing import List

from .cycles import CycleSearchResult, cycles_equivalent, find_cycle, is_reinforcing_cycle
from .graph_model import ClassifiedCycle, LoopGraph, LoopNode

logger = logging.getLogger(__name__)


def analyze_graph(graph: LoopGraph) -> List[ClassifiedCycle]:
    """Return the distinct loops of ``graph`` in discovery order.

    Every node is used once as a search start; a loop already reached from
    another start node is dropped.
    """
    accepted: List[ClassifiedCycle] = []
    for node in graph:
        result = find_cycle(graph, node)
        if not result.found:
            continue

        if any(cycles_equivalent(cycle.path, result.path) for cycle in accepted):
            logger.debug("Skipping duplicate loop from %s: %s", node.id, result.node_ids)
            continue

        cycle = ClassifiedCycle(path=result.path, is_reinforcing=is_reinforcing_cycle(result.path))
        logger.debug("Accepted %s loop: %s", cycle.kind.lower(), cycle.node_ids)
        accepted.append(cycle)
    return accepted


def analyze_node(graph: LoopGraph, node: LoopNode) -> CycleSearchResult:
    return find_cycle(graph, node)
