from __future__ import annotations

from typing import List

from pygame.math import Vector2

from .config import SimulationConfig
from .noise import NoiseField
from .rng import DeterministicRng


class SwarmTargets:
    """One wandering rally point per swarm, driven by a shared :class:`NoiseField`."""

    def __init__(self, config: SimulationConfig, noise: NoiseField, rng: DeterministicRng):
        self._config = config
        self._noise = noise
        self._positions: List[Vector2] = [
            Vector2(rng.next_range(0.0, config.width), rng.next_range(0.0, config.height))
            for _ in range(config.num_swarms)
        ]

    @property
    def positions(self) -> List[Vector2]:
        return self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def __getitem__(self, swarm_id: int) -> Vector2:
        return self._positions[swarm_id]

    def compute(self, tick: int) -> List[Vector2]:
        wander = self._config.wander
        center_x = self._config.width * 0.5
        center_y = self._config.height * 0.5
        result = []
        for swarm_id in range(len(self._positions)):
            k = tick * wander.drift_rate + swarm_id * wander.swarm_phase
            x = center_x + self._noise.sample(k) * wander.range_x - wander.range_x * 0.5
            y = center_y + self._noise.sample(k + wander.axis_phase) * wander.range_y - wander.range_y * 0.5
            result.append(Vector2(x, y))
        return result

    def commit(self, positions: List[Vector2]) -> None:
        for current, new in zip(self._positions, positions):
            current.update(new.x, new.y)

    def update(self, tick: int) -> None:
        self.commit(self.compute(tick))
