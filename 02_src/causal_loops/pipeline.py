"""Loop analysis pipeline: phases share one context dict, run in order."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Tuple

logger = logging.getLogger(__name__)


class PipelinePhase(ABC):
    phase_name: str
    required_keys: Tuple[str, ...] = ()

    @abstractmethod
    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError


class PipelineRunner:
    """Feeds each phase the merged output of the phases before it.

    The returned context lists finished phases with their wall time under
    ``completed_phases``.
    """

    def __init__(self, phases: Iterable[PipelinePhase]) -> None:
        self.phases: List[PipelinePhase] = list(phases)

    def run(self, context: Dict[str, Any]) -> Dict[str, Any]:
        current = dict(context)
        completed: List[Dict[str, Any]] = []
        for phase in self.phases:
            missing = [key for key in phase.required_keys if key not in current]
            if missing:
                raise KeyError(f"Phase '{phase.phase_name}' needs context keys: {', '.join(missing)}")

            started = time.perf_counter()
            phase_result = phase.run(current)
            if not isinstance(phase_result, dict):
                raise TypeError(f"Phase '{phase.phase_name}' must return dict context.")
            elapsed = time.perf_counter() - started

            logger.info("Phase '%s' finished in %.3fs", phase.phase_name, elapsed)
            current.update(phase_result)
            completed.append({"phase": phase.phase_name, "seconds": round(elapsed, 6)})
        current["completed_phases"] = completed
        return current
