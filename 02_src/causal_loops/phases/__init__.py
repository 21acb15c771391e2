"""Pipeline phases for causal loop analysis."""

from .analysis import LoopAnalysisPhase
from .report import LoopReportPhase
from .snapshot import SnapshotAcquisitionPhase

__all__ = [
    "SnapshotAcquisitionPhase",
    "LoopAnalysisPhase",
    "LoopReportPhase",
]
