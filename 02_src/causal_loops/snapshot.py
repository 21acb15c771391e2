"""Board data sources and asynchronous snapshot acquisition."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Protocol

from .graph_model import LoopGraph
from .graph_orchestrator import GraphOrchestrator, endpoint_item

logger = logging.getLogger(__name__)

DEFAULT_NODE_TYPES = ("sticky_note",)


class BoardSourceError(RuntimeError):
    """Raised when the board cannot supply items or connectors."""


class BoardDataSource(Protocol):
    async def get_selected_items(self) -> List[Dict[str, Any]]:
        ...

    async def get_connectors(self, item_id: str) -> List[Dict[str, Any]]:
        ...


class JsonBoardSource:
    """Board export on disk: ``{"items": [...], "connectors": [...]}``."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._payload: Dict[str, Any] | None = None

    def _load(self) -> Dict[str, Any]:
        if self._payload is not None:
            return self._payload
        if not self.path.exists():
            raise BoardSourceError(f"Board export not found: {self.path}")
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as error:
            raise BoardSourceError(f"Malformed board export {self.path}: {error.msg}") from error
        if not isinstance(payload, dict):
            raise BoardSourceError(f"Board export {self.path} must be a JSON object")
        self._check_shape(payload)
        self._payload = payload
        return payload

    def _check_shape(self, payload: Dict[str, Any]) -> None:
        for key in ("items", "connectors"):
            if not isinstance(payload.get(key, []), list):
                raise BoardSourceError(f"Board export {self.path}: '{key}' must be a list")
        for connector in payload.get("connectors", []):
            if not isinstance(connector, dict):
                raise BoardSourceError(f"Board export {self.path}: connectors must be objects")
            for key in ("start", "end"):
                if not isinstance(connector.get(key) or {}, dict):
                    raise BoardSourceError(
                        f"Board export {self.path}: connector {connector.get('id')!r} '{key}' must be an object"
                    )
            if not isinstance(connector.get("captions") or [], list):
                raise BoardSourceError(
                    f"Board export {self.path}: connector {connector.get('id')!r} 'captions' must be a list"
                )

    async def get_selected_items(self) -> List[Dict[str, Any]]:
        items = self._load().get("items", [])
        return [item for item in items if isinstance(item, dict) and item.get("id") not in (None, "")]

    async def get_connectors(self, item_id: str) -> List[Dict[str, Any]]:
        item_id = str(item_id)
        return [
            connector
            for connector in self._load().get("connectors", [])
            if item_id in (endpoint_item(connector, "start"), endpoint_item(connector, "end"))
        ]


async def acquire_snapshot(
    source: BoardDataSource,
    node_types: Iterable[str] = DEFAULT_NODE_TYPES,
) -> LoopGraph:
    """Fetch selected notes with their outgoing connectors.

    All connector requests run concurrently and must all succeed; a failing
    request propagates before any graph is assembled.
    """
    allowed_types = set(node_types)
    items = [item for item in await source.get_selected_items() if str(item.get("type")) in allowed_types]
    connector_lists = await asyncio.gather(
        *(source.get_connectors(str(item["id"])) for item in items)
    )

    orchestrator = GraphOrchestrator()
    for item in items:
        orchestrator.add_node(str(item["id"]), content=str(item.get("content") or ""))
    for item, connectors in zip(items, connector_lists):
        orchestrator.attach_board_connectors(str(item["id"]), connectors)

    logger.info("Acquired snapshot with %d nodes", len(orchestrator.graph))
    return orchestrator.graph
