from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.simulation import Simulation
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "population",
    "swarms",
    "neighbor_checks",
    "avg_speed",
    "max_speed",
    "avg_target_distance",
    "tick_ms",
]


def _format_row(metrics: TickMetrics, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.swarms,
        metrics.neighbor_checks,
        f"{metrics.average_speed:.4f}",
        f"{metrics.max_speed_observed:.4f}",
        f"{metrics.average_target_distance:.4f}",
        f"{tick_ms:.3f}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    summary_window: int = 5000,
    config: Optional[SimulationConfig] = None,
) -> Simulation:
    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config = replace(config, seed=seed)
    simulation = Simulation(config)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_HEADER)

    tick_ms_series: list[float] = []
    speed_series: list[float] = []
    target_distance_series: list[float] = []
    neighbor_checks_series: list[float] = []

    try:
        for _ in range(steps):
            metrics = simulation.tick()
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            if summary_path:
                tick_ms_series.append(tick_ms)
                speed_series.append(metrics.average_speed)
                target_distance_series.append(metrics.average_target_distance)
                neighbor_checks_series.append(float(metrics.neighbor_checks))
            if writer:
                writer.writerow(_format_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "swarms": config.num_swarms,
            "agents_per_swarm": config.agents_per_swarm,
            "deterministic_log": deterministic_log,
            "tick_ms": _summary_stats(tick_ms_series),
            "avg_speed": _summary_stats(speed_series),
            "avg_target_distance": _summary_stats(target_distance_series),
            "neighbor_checks": _summary_stats(neighbor_checks_series),
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "avg_speed": _summary_stats(speed_series[tail_slice]),
                "avg_target_distance": _summary_stats(target_distance_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    logger.info("ran %d ticks (seed=%d)", steps, config.seed)
    return simulation


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Headless multi-swarm simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=5000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config=config,
    )


if __name__ == "__main__":
    main()
