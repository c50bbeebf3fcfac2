"""Command line entry point for the intersection signal timing planner."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from signal_planner import EngineConfig, SignalPlanner, SimulationResult, load_presets
from signal_planner.models import DIRECTIONS, DIRECTION_LABELS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--preset", choices=list(load_presets()), help="Run a named preset")
    source.add_argument("--config", type=Path, help="Path to a JSON intersection configuration")
    parser.add_argument("--save", action="store_true", help="Append the result to history")
    parser.add_argument("--history", action="store_true", help="List saved runs")
    parser.add_argument("--clear-history", action="store_true", help="Delete saved runs")
    parser.add_argument("--history-path", type=Path, help="History JSON file location")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--list-presets", action="store_true")
    parser.add_argument("--log-level", default="INFO")
    return parser


def format_summary(result: SimulationResult) -> str:
    original = result.config.original
    optimized = result.config.optimized
    before = result.before.aggregate
    after = result.after.aggregate
    lines = [
        f"Run {result.id} at {result.timestamp}",
        f"Cycle length: {original.cycle_length}s -> {optimized.cycle_length}s",
    ]
    for direction in DIRECTIONS:
        old = original.signal_timing[direction]
        new = optimized.signal_timing[direction]
        lines.append(
            f"  {DIRECTION_LABELS[direction]:<6} green {old.green}s -> {new.green}s, "
            f"congestion {result.before.per_direction[direction].congestion_index} -> "
            f"{result.after.per_direction[direction].congestion_index}"
        )
    lines.append(f"Average delay: {before.avg_delay}s -> {after.avg_delay}s")
    lines.append(f"Total queue: {before.total_queue} -> {after.total_queue} vehicles")
    lines.append(f"Throughput: {before.total_throughput} -> {after.total_throughput} veh/h")
    for name, value in result.improvements.to_dict().items():
        lines.append(f"  {name}: {value:+d}%")
    return "\n".join(lines)


def configure_logging(config: EngineConfig) -> None:
    logging.basicConfig(level=getattr(logging, config.log_level.upper(), logging.INFO))


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = EngineConfig(log_level=args.log_level)
    if args.history_path is not None:
        config.history_path = args.history_path
    configure_logging(config)

    if args.list_presets:
        for key, preset in load_presets().items():
            print(f"{key}: {preset.name} - {preset.description}")
        return

    planner = SignalPlanner(config)

    if args.clear_history:
        planner.clear_history()
        print("History cleared")
        return

    if args.history:
        for entry in planner.history():
            print(
                f"{entry.id}  {entry.timestamp}  delay "
                f"{entry.before.aggregate.avg_delay}s -> {entry.after.aggregate.avg_delay}s"
            )
        return

    if args.config is not None:
        raw_config = json.loads(args.config.read_text(encoding="utf-8"))
    else:
        raw_config = load_presets()[args.preset or "normalDay"].config

    result = planner.run(raw_config, save=args.save)
    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(format_summary(result))


if __name__ == "__main__":
    main()
