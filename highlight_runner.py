"""
CLI to compile a path-highlight schedule for one entanglement result.

Loads a topology snapshot and a backend connection result (both JSON),
interprets the result into segments, compiles the timed highlight schedule
and prints a summary. The instruction list can be written out as JSON for a
renderer to replay.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence
import argparse
import json
import logging

from errors import ConfigError, SnapshotError
from highlight_config import load_config
from network_manager import HighlightPlan, NetworkManager
from outcomes import SegmentKind
from schedule_compiler import instructions_to_dicts
from snapshot import read_snapshot


def build_plan(topology_path: Path, result_path: Path, config_path: Optional[Path] = None) -> HighlightPlan:
    cfg = load_config(config_path)
    manager = NetworkManager(read_snapshot(topology_path), cfg)
    print(f"[schedule] loaded {len(manager.store)} nodes, {len(manager.store.links())} links from {topology_path}")
    result = json.loads(result_path.read_text())
    return manager.plan_highlight(result)


def summarize(plan: HighlightPlan) -> List[str]:
    lines = [
        f"[schedule] path {' -> '.join(plan.path) if plan.path else '(none)'}",
        "[schedule] segments: "
        + ", ".join(f"{kind.value}={plan.count(kind)}" for kind in SegmentKind),
        f"[schedule] {len(plan.instructions)} instructions, total duration {plan.duration_ms} ms",
    ]
    if plan.path_cost is not None:
        lines.append(f"[schedule] path cost {plan.path_cost:g}")
    return lines


def write_schedule(plan: HighlightPlan, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(instructions_to_dicts(plan.instructions), indent=2))


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument("--topology", type=Path, required=True, help="topology snapshot JSON")
    parser.add_argument("--result", type=Path, required=True, help="backend connection result JSON")
    parser.add_argument("--config", type=Path, default=None, help="timing/color YAML (default: config/highlight.yml if present)")
    parser.add_argument("--output", type=Path, default=None, help="write instructions as JSON here")
    parser.add_argument("--log-level", default="WARNING", help="logging level for library modules")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        plan = build_plan(args.topology, args.result, args.config)
    except (SnapshotError, ConfigError, json.JSONDecodeError, OSError) as exc:
        print(f"[schedule] failed: {exc}")
        return 1
    for line in summarize(plan):
        print(line)
    if args.output:
        write_schedule(plan, args.output)
        print(f"[schedule] wrote instructions to {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
