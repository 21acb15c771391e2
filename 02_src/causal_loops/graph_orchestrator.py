"""Deterministic assembly of a loop graph snapshot from board payloads."""

from typing import Any, Dict, Iterable, Optional

from .graph_model import Connector, LoopGraph, LoopNode


def endpoint_item(payload: Dict[str, Any], key: str) -> Optional[str]:
    """Item id at the ``start`` or ``end`` of a board connector, as a string."""
    endpoint = payload.get(key)
    if not isinstance(endpoint, dict):
        return None
    item = endpoint.get("item")
    if item is None or item == "":
        return None
    return str(item)


class GraphOrchestrator:
    """Owns node registration and outgoing connector attachment for one snapshot."""

    def __init__(self) -> None:
        self.graph = LoopGraph()
        self._connector_registry: Dict[str, Connector] = {}

    def add_node(self, node_id: str, content: str = "") -> LoopNode:
        existing = self.graph.get(node_id)
        if existing is not None:
            existing.content = content
            return existing

        node = LoopNode(id=node_id, content=content)
        self.graph.nodes[node_id] = node
        return node

    def add_connector(
        self,
        connector_id: str,
        source_id: str,
        target_id: Optional[str],
        caption: Optional[str] = None,
    ) -> Connector:
        source = self.graph.get(source_id)
        if source is None:
            raise ValueError(f"Unknown source node: {source_id}")

        existing = self._connector_registry.get(connector_id)
        if existing is not None:
            return existing

        connector = Connector(id=connector_id, source=source_id, target=target_id, caption=caption)
        source.connectors.append(connector)
        self._connector_registry[connector_id] = connector
        return connector

    def attach_board_connectors(self, node_id: str, payloads: Iterable[Dict[str, Any]]) -> int:
        """Attach connectors that start at ``node_id``; the rest are ignored."""
        node_id = str(node_id)
        attached = 0
        for payload in payloads:
            if endpoint_item(payload, "start") != node_id:
                continue
            end_item = endpoint_item(payload, "end")
            captions = payload.get("captions") or []
            caption = captions[0].get("content") if captions and isinstance(captions[0], dict) else None
            connector_id = str(payload.get("id") or f"{node_id}->{end_item}:{attached}")
            self.add_connector(
                connector_id=connector_id,
                source_id=node_id,
                target_id=end_item,
                caption=caption,
            )
            attached += 1
        return attached
