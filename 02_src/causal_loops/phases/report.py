"""Human-readable loop report phase."""

from typing import Any, Dict, List, Sequence

from ..graph_model import ClassifiedCycle, LoopNode
from ..labels import extract_plain_text
from ..pipeline import PipelinePhase

PATH_SEPARATOR = " -> "


class LoopReportPhase(PipelinePhase):
    phase_name = "report"

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        cycles: List[ClassifiedCycle] = context.get("cycles", [])
        node_results: List[Dict[str, Any]] = context.get("node_results", [])

        loops = [
            {
                "kind": cycle.kind,
                "node_ids": cycle.node_ids,
                "summary": f"{cycle.kind}: {self._render_path(cycle.path)}",
            }
            for cycle in cycles
        ]

        items: List[Dict[str, Any]] = []
        for entry in node_results:
            node: LoopNode = entry["node"]
            result = entry["result"]
            item = {
                "id": node.id,
                "content": self._label(node),
                "has_cycle": result.found,
            }
            if result.found:
                item["path"] = self._render_path(result.path)
                item["kind"] = result.kind
            items.append(item)

        return {
            "loop_report": {
                "summary": {
                    "loop_count": len(loops),
                    "reinforcing_count": sum(1 for cycle in cycles if cycle.is_reinforcing),
                    "balancing_count": sum(1 for cycle in cycles if not cycle.is_reinforcing),
                },
                "loops": loops,
                "items": items,
            }
        }

    @staticmethod
    def _label(node: LoopNode) -> str:
        return extract_plain_text(node.content, inject_spacing=True).strip()

    @classmethod
    def _render_path(cls, path: Sequence[LoopNode]) -> str:
        return PATH_SEPARATOR.join(cls._label(node) for node in path)
