from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    swarms: int
    neighbor_checks: int
    average_speed: float
    max_speed_observed: float
    average_target_distance: float
    tick_duration_ms: float = 0.0
