"""Loop analysis phase powered by a LangGraph workflow."""

import logging
from typing import Any, Dict, List, Optional

from langgraph.graph import END, START, StateGraph
from typing_extensions import TypedDict

from ..analysis import analyze_graph, analyze_node
from ..graph_model import ClassifiedCycle, LoopGraph
from ..pipeline import PipelinePhase

logger = logging.getLogger(__name__)


class AnalysisState(TypedDict):
    graph: LoopGraph
    focus_node_id: Optional[str]
    cycles: List[ClassifiedCycle]
    node_results: List[Dict[str, Any]]


class LoopAnalysisPhase(PipelinePhase):
    phase_name = "analysis"
    required_keys = ("graph",)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        graph: LoopGraph = context["graph"]
        workflow = self._build_workflow()
        result_state = workflow.invoke(
            {
                "graph": graph,
                "focus_node_id": context.get("focus_node_id"),
                "cycles": [],
                "node_results": [],
            }
        )
        cycles = result_state.get("cycles", [])
        logger.info(
            "Found %d distinct loops across %d nodes (%d reinforcing)",
            len(cycles),
            len(graph),
            sum(1 for cycle in cycles if cycle.is_reinforcing),
        )
        return {"cycles": cycles, "node_results": result_state.get("node_results", [])}

    def _build_workflow(self):
        workflow = StateGraph(AnalysisState)
        workflow.add_node("sweep_loops", self._sweep_loops)
        workflow.add_node("inspect_nodes", self._inspect_nodes)
        workflow.add_edge(START, "sweep_loops")
        workflow.add_edge("sweep_loops", "inspect_nodes")
        workflow.add_edge("inspect_nodes", END)
        return workflow.compile()

    @staticmethod
    def _sweep_loops(state: AnalysisState) -> Dict[str, Any]:
        return {"cycles": analyze_graph(state["graph"])}

    @staticmethod
    def _inspect_nodes(state: AnalysisState) -> Dict[str, Any]:
        graph = state["graph"]
        focus_node_id = state.get("focus_node_id")
        if focus_node_id:
            focus_node = graph.get(focus_node_id)
            if focus_node is None:
                logger.warning("Focus node %s is not part of the snapshot", focus_node_id)
            nodes = [focus_node] if focus_node is not None else []
        else:
            nodes = list(graph)

        return {
            "node_results": [
                {"node": node, "result": analyze_node(graph, node)} for node in nodes
            ]
        }
