"""Feedback loop detection for causal loop diagrams."""

from .analysis import analyze_graph, analyze_node
from .cycles import CycleSearchResult, cycles_equivalent, find_cycle, is_reinforcing_cycle
from .graph_model import ClassifiedCycle, Connector, LoopGraph, LoopNode
from .graph_orchestrator import GraphOrchestrator
from .labels import extract_plain_text, is_negative_caption
from .pipeline import PipelinePhase, PipelineRunner

__all__ = [
    "Connector",
    "LoopNode",
    "LoopGraph",
    "CycleSearchResult",
    "ClassifiedCycle",
    "GraphOrchestrator",
    "PipelinePhase",
    "PipelineRunner",
    "analyze_graph",
    "analyze_node",
    "find_cycle",
    "is_reinforcing_cycle",
    "cycles_equivalent",
    "extract_plain_text",
    "is_negative_caption",
]
