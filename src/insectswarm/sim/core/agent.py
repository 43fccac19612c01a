from __future__ import annotations

from dataclasses import dataclass, field

from pygame.math import Vector2

Color = tuple[int, int, int]


def swarm_color(swarm_id: int) -> Color:
    def _channel(value: int) -> int:
        return max(0, min(255, value))

    return (_channel(150 + swarm_id * 50), _channel(255 - swarm_id * 80), 220)


@dataclass(slots=True)
class Agent:
    index: int
    swarm_id: int
    position: Vector2
    velocity: Vector2
    max_speed: float = 4.0
    max_force: float = 0.12
    size: float = 6.0
    acceleration: Vector2 = field(default_factory=Vector2)
    color: Color = field(init=False)

    def __post_init__(self) -> None:
        self.color = swarm_color(self.swarm_id)
