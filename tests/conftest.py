import json

import pytest

from causal_loops.graph_orchestrator import GraphOrchestrator


def build_graph(node_ids, edges):
    """Edges are ``(source, target)`` or ``(source, target, caption)`` tuples."""
    orchestrator = GraphOrchestrator()
    for node_id in node_ids:
        orchestrator.add_node(node_id, content=f"<p>{node_id}</p>")
    for index, edge in enumerate(edges):
        source, target = edge[0], edge[1]
        caption = edge[2] if len(edge) > 2 else None
        orchestrator.add_connector(f"c{index}", source, target, caption)
    return orchestrator.graph


@pytest.fixture
def graph_factory():
    return build_graph


@pytest.fixture
def board_export(tmp_path):
    def write(items, connectors, name="board.json"):
        path = tmp_path / name
        path.write_text(json.dumps({"items": items, "connectors": connectors}), encoding="utf-8")
        return path

    return write
