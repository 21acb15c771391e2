"""Polling loop that re-runs analysis whenever the board export changes."""

import logging
import time
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def watch_board(
    path: Path | str,
    on_change: Callable[[Path], None],
    interval: float = 1.0,
    max_iterations: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Call ``on_change`` on the first poll and after every modification.

    Returns the number of times ``on_change`` ran. A missing file is polled
    again until it appears.
    """
    board_path = Path(path)
    last_mtime: Optional[float] = None
    triggered = 0
    iteration = 0

    while max_iterations is None or iteration < max_iterations:
        iteration += 1
        try:
            mtime = board_path.stat().st_mtime
        except FileNotFoundError:
            logger.debug("Waiting for board export %s", board_path)
            mtime = None

        if mtime is not None and mtime != last_mtime:
            last_mtime = mtime
            logger.info("Board export changed, re-running analysis")
            on_change(board_path)
            triggered += 1

        if max_iterations is None or iteration < max_iterations:
            sleep(interval)
    return triggered
