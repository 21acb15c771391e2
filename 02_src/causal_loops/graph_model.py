"""Causal loop graph primitives: signed connectors between statement nodes."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional


def loop_kind(is_reinforcing: bool) -> str:
    return "REINFORCING" if is_reinforcing else "BALANCING"


@dataclass
class Connector:
    id: str
    source: str
    target: Optional[str] = None
    caption: Optional[str] = None


@dataclass
class LoopNode:
    id: str
    content: str = ""
    connectors: List[Connector] = field(default_factory=list)


@dataclass
class LoopGraph:
    """Read-only arena of nodes keyed by id, in snapshot order."""

    nodes: Dict[str, LoopNode] = field(default_factory=dict)

    def get(self, node_id: Optional[str]) -> Optional[LoopNode]:
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def __iter__(self) -> Iterator[LoopNode]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)


@dataclass
class ClassifiedCycle:
    path: List[LoopNode]
    is_reinforcing: bool

    @property
    def node_ids(self) -> List[str]:
        return [node.id for node in self.path]

    @property
    def kind(self) -> str:
        return loop_kind(self.is_reinforcing)
