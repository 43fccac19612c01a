from __future__ import annotations

from typing import List

from pygame.math import Vector2

from ..core.agent import Agent
from ..types.metrics import TickMetrics
from ..utils.math2d import distance, magnitude


def create_metrics(
    tick: int,
    agents: List[Agent],
    targets: List[Vector2],
    neighbor_checks: int,
    duration_ms: float,
) -> TickMetrics:
    population = len(agents)
    speed_sum = 0.0
    max_speed = 0.0
    target_distance_sum = 0.0
    for agent in agents:
        speed = magnitude(agent.velocity)
        speed_sum += speed
        if speed > max_speed:
            max_speed = speed
        target_distance_sum += distance(agent.position, targets[agent.swarm_id])
    return TickMetrics(
        tick=tick,
        population=population,
        swarms=len(targets),
        neighbor_checks=neighbor_checks,
        average_speed=0.0 if population == 0 else speed_sum / population,
        max_speed_observed=max_speed,
        average_target_distance=0.0 if population == 0 else target_distance_sum / population,
        tick_duration_ms=duration_ms,
    )
