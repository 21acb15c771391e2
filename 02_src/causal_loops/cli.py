"""CLI entrypoint helpers for causal loop analysis of a board export."""

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv

from .phases import LoopAnalysisPhase, LoopReportPhase, SnapshotAcquisitionPhase
from .pipeline import PipelinePhase, PipelineRunner
from .snapshot import DEFAULT_NODE_TYPES, BoardSourceError, JsonBoardSource
from .watch import watch_board

DEFAULT_OUTPUT_PATH = "03_data/causal_loops/loop_report.json"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_default_phases() -> List[PipelinePhase]:
    return [
        SnapshotAcquisitionPhase(),
        LoopAnalysisPhase(),
        LoopReportPhase(),
    ]


def run_pipeline(
    input_path: str,
    focus_node_id: Optional[str] = None,
    node_types: Sequence[str] = DEFAULT_NODE_TYPES,
) -> Dict[str, Any]:
    initial_context: Dict[str, Any] = {
        "board_source": JsonBoardSource(input_path),
        "node_types": tuple(node_types),
        "focus_node_id": focus_node_id,
    }
    runner = PipelineRunner(phases=build_default_phases())
    final_context = runner.run(initial_context)
    artifact = dict(final_context["loop_report"])
    artifact["meta"] = {
        "input_path": input_path,
        "node_count": len(final_context["graph"]),
        "focus_node_id": focus_node_id,
        "node_types": list(node_types),
        "phases": [entry["phase"] for entry in final_context["completed_phases"]],
    }
    return artifact


def _split_types(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _log_level(raw: str) -> str:
    level = raw.strip().upper()
    if level not in LOG_LEVELS:
        raise argparse.ArgumentTypeError(f"invalid log level {raw!r}, choose from {', '.join(LOG_LEVELS)}")
    return level


def _positive_seconds(raw: str) -> float:
    try:
        seconds = float(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid interval {raw!r}, expected seconds") from None
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"interval must be positive, got {raw!r}")
    return seconds


def parse_args(argv: List[str] | None = None) -> argparse.Namespace:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Find reinforcing and balancing loops on a board export.")
    parser.add_argument(
        "--input-path",
        default=os.getenv("CAUSAL_LOOPS_BOARD_PATH", ""),
        help="Board export JSON with items and connectors.",
    )
    parser.add_argument(
        "--output-path",
        default=os.getenv("CAUSAL_LOOPS_OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
        help="Where to save resulting loop report JSON.",
    )
    parser.add_argument("--node", default=None, help="Only report loop membership for this node id.")
    parser.add_argument(
        "--node-types",
        default=os.getenv("CAUSAL_LOOPS_NODE_TYPES", ",".join(DEFAULT_NODE_TYPES)),
        help="Comma separated board item types treated as loop nodes.",
    )
    parser.add_argument(
        "--log-level",
        type=_log_level,
        default=os.getenv("CAUSAL_LOOPS_LOG_LEVEL", "WARNING"),
        help="Logging level name.",
    )
    parser.add_argument("--watch", action="store_true", help="Re-run whenever the board export changes.")
    parser.add_argument(
        "--interval",
        type=_positive_seconds,
        default=os.getenv("CAUSAL_LOOPS_WATCH_INTERVAL", "1.0"),
        help="Polling interval in seconds for --watch.",
    )
    return parser.parse_args(argv)


def write_report(args: argparse.Namespace) -> Dict[str, Any]:
    artifact = run_pipeline(
        input_path=args.input_path,
        focus_node_id=args.node,
        node_types=_split_types(args.node_types),
    )
    output_path = Path(args.output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(artifact, ensure_ascii=False, indent=2), encoding="utf-8")
    print(f"Loop report saved to: {output_path.resolve()}")
    for loop in artifact["loops"]:
        print(loop["summary"])
    print(
        "Counts:",
        f"nodes={artifact['meta']['node_count']}",
        f"loops={artifact['summary']['loop_count']}",
        f"reinforcing={artifact['summary']['reinforcing_count']}",
        f"balancing={artifact['summary']['balancing_count']}",
    )
    return artifact


def main(argv: List[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level)
    if not args.input_path:
        print("No board export given: pass --input-path or set CAUSAL_LOOPS_BOARD_PATH.")
        return 2

    if args.watch:
        def rerun(_: Path) -> None:
            try:
                write_report(args)
            except BoardSourceError as error:
                print(f"Board export unreadable: {error}")

        try:
            watch_board(args.input_path, rerun, interval=args.interval)
        except KeyboardInterrupt:
            pass
        return 0

    try:
        write_report(args)
    except BoardSourceError as error:
        print(f"Board export unreadable: {error}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
