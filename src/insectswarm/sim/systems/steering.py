from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List

from pygame.math import Vector2

from ..core.agent import Agent
from ..core.config import SteeringConfig
from ..utils.math2d import _clamp_length_xy_f, _set_magnitude_xy


class Behavior(str, Enum):
    ALIGN = "align"
    COHERE = "cohere"
    SEPARATE = "separate"


@dataclass(slots=True)
class ForceBreakdown:
    """Unweighted steering forces acting on one agent for one tick."""

    align: Vector2
    cohere: Vector2
    separate: Vector2
    home: Vector2
    avoid: Vector2

    def weighted_sum(self, steering: SteeringConfig) -> Vector2:
        # Summed in a fixed order so results are reproducible bit for bit.
        total = Vector2()
        for force, weight in (
            (self.align, steering.align_weight),
            (self.cohere, steering.cohere_weight),
            (self.separate, steering.separate_weight),
            (self.home, steering.home_weight),
            (self.avoid, steering.avoid_weight),
        ):
            total.x += force.x * weight
            total.y += force.y * weight
        return total


def steer(agent: Agent, candidates: List[Agent], behavior: Behavior, radius: float) -> Vector2:
    """Average a per-neighbour quantity over neighbours strictly inside ``radius`` and turn it into a bounded steering force.

    Neighbours are every candidate other than ``agent`` itself. With no
    neighbour the result is the zero vector. Otherwise the average (minus the
    agent's position for cohesion) is scaled to ``max_speed``, the agent's
    velocity is subtracted and the result is limited to ``max_force``.
    """
    pos_x = agent.position.x
    pos_y = agent.position.y
    sum_x = 0.0
    sum_y = 0.0
    count = 0
    for other in candidates:
        if other is agent:
            continue
        other_pos = other.position
        diff_x = pos_x - other_pos.x
        diff_y = pos_y - other_pos.y
        dist = math.hypot(diff_x, diff_y)
        if dist >= radius:
            continue
        if behavior is Behavior.ALIGN:
            sum_x += other.velocity.x
            sum_y += other.velocity.y
        elif behavior is Behavior.COHERE:
            sum_x += other_pos.x
            sum_y += other_pos.y
        elif dist > 0.0:
            away_x = diff_x / dist / dist
            away_y = diff_y / dist / dist
            # Near-coincident neighbours can overflow; they count but push no harder than coincident ones.
            if math.isfinite(away_x) and math.isfinite(away_y):
                sum_x += away_x
                sum_y += away_y
        count += 1

    if count == 0:
        return Vector2()
    avg_x = sum_x / count
    avg_y = sum_y / count
    if behavior is Behavior.COHERE:
        avg_x -= pos_x
        avg_y -= pos_y
    desired_x, desired_y = _set_magnitude_xy(avg_x, avg_y, agent.max_speed)
    return Vector2(
        *_clamp_length_xy_f(desired_x - agent.velocity.x, desired_y - agent.velocity.y, agent.max_force)
    )


def align(agent: Agent, mates: List[Agent], radius: float) -> Vector2:
    return steer(agent, mates, Behavior.ALIGN, radius)


def cohere(agent: Agent, mates: List[Agent], radius: float) -> Vector2:
    return steer(agent, mates, Behavior.COHERE, radius)


def separate(agent: Agent, neighbors: List[Agent], radius: float) -> Vector2:
    return steer(agent, neighbors, Behavior.SEPARATE, radius)


def home_bias(agent: Agent, target: Vector2) -> Vector2:
    """Seek steering toward ``target``; unlike the neighbour behaviours it has no radius."""
    desired_x, desired_y = _set_magnitude_xy(
        target.x - agent.position.x, target.y - agent.position.y, agent.max_speed
    )
    return Vector2(
        *_clamp_length_xy_f(desired_x - agent.velocity.x, desired_y - agent.velocity.y, agent.max_force)
    )


def compute_forces(
    agent: Agent,
    mates: List[Agent],
    others: List[Agent],
    target: Vector2,
    steering: SteeringConfig,
) -> ForceBreakdown:
    return ForceBreakdown(
        align=align(agent, mates, steering.align_radius),
        cohere=cohere(agent, mates, steering.cohere_radius),
        separate=separate(agent, mates, steering.separate_radius),
        home=home_bias(agent, target),
        avoid=separate(agent, others, steering.avoid_radius),
    )
