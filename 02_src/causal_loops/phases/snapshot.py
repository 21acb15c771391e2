"""Snapshot acquisition phase."""

import asyncio
from typing import Any, Dict

from ..pipeline import PipelinePhase
from ..snapshot import DEFAULT_NODE_TYPES, BoardDataSource, acquire_snapshot


class SnapshotAcquisitionPhase(PipelinePhase):
    phase_name = "snapshot"
    required_keys = ("board_source",)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        source: BoardDataSource = context["board_source"]
        node_types = context.get("node_types") or DEFAULT_NODE_TYPES
        graph = asyncio.run(acquire_snapshot(source, node_types=node_types))
        return {"graph": graph}
