from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml


class ConfigError(ValueError):
    """Raised when a configuration value cannot drive a simulation."""


@dataclass
class AgentConfig:
    max_speed: float = 4.0
    max_force: float = 0.12
    size: float = 6.0
    initial_speed: float = 2.0


@dataclass
class SteeringConfig:
    align_radius: float = 50.0
    cohere_radius: float = 60.0
    separate_radius: float = 25.0
    # Inter-swarm avoidance is a global setting, not tuned per swarm.
    avoid_radius: float = 40.0
    align_weight: float = 1.2
    cohere_weight: float = 1.0
    separate_weight: float = 1.8
    home_weight: float = 0.8
    avoid_weight: float = 2.5

    @property
    def max_radius(self) -> float:
        return max(self.align_radius, self.cohere_radius, self.separate_radius, self.avoid_radius)


@dataclass
class WanderConfig:
    drift_rate: float = 0.002
    swarm_phase: float = 10.0
    axis_phase: float = 100.0
    range_x: float = 200.0
    range_y: float = 150.0
    octaves: int = 4
    falloff: float = 0.5


@dataclass
class SimulationConfig:
    num_swarms: int = 2
    agents_per_swarm: int = 75
    width: float = 800.0
    height: float = 600.0
    seed: int = 42
    use_spatial_grid: bool = True
    agent: AgentConfig = field(default_factory=AgentConfig)
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    wander: WanderConfig = field(default_factory=WanderConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def validate(self) -> "SimulationConfig":
        """Check every field and raise :class:`ConfigError` naming the first bad one.

        Values are never clamped: a configuration either passes unchanged or is rejected.
        """
        if isinstance(self.num_swarms, bool) or not isinstance(self.num_swarms, int) or self.num_swarms <= 0:
            raise ConfigError(f"num_swarms must be a positive integer, got {self.num_swarms!r}")
        if (
            isinstance(self.agents_per_swarm, bool)
            or not isinstance(self.agents_per_swarm, int)
            or self.agents_per_swarm < 0
        ):
            raise ConfigError(f"agents_per_swarm must be a non-negative integer, got {self.agents_per_swarm!r}")
        _require_positive("width", self.width)
        _require_positive("height", self.height)

        _require_non_negative("agent.max_speed", self.agent.max_speed)
        _require_non_negative("agent.max_force", self.agent.max_force)
        _require_positive("agent.size", self.agent.size)
        _require_non_negative("agent.initial_speed", self.agent.initial_speed)
        if self.agent.initial_speed > self.agent.max_speed:
            raise ConfigError(
                f"agent.initial_speed ({self.agent.initial_speed!r}) must not exceed "
                f"agent.max_speed ({self.agent.max_speed!r})"
            )

        for item in fields(self.steering):
            _require_non_negative(f"steering.{item.name}", getattr(self.steering, item.name))

        wander = self.wander
        for name in ("drift_rate", "swarm_phase", "axis_phase", "range_x", "range_y"):
            _require_non_negative(f"wander.{name}", getattr(wander, name))
        if isinstance(wander.octaves, bool) or not isinstance(wander.octaves, int) or wander.octaves < 1:
            raise ConfigError(f"wander.octaves must be an integer >= 1, got {wander.octaves!r}")
        if not _is_number(wander.falloff) or not 0.0 < wander.falloff <= 1.0:
            raise ConfigError(f"wander.falloff must lie in (0, 1], got {wander.falloff!r}")
        return self


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 1
    tick_rate: float = 60.0
    # Snapshots kept for unacknowledged renderers; the oldest are dropped first.
    snapshot_queue_limit: int = 120


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _require_positive(name: str, value: object) -> None:
    if not _is_number(value) or value <= 0:
        raise ConfigError(f"{name} must be a positive finite number, got {value!r}")


def _require_non_negative(name: str, value: object) -> None:
    if not _is_number(value) or value < 0:
        raise ConfigError(f"{name} must be a non-negative finite number, got {value!r}")


def load_config(raw: dict) -> SimulationConfig:
    sections = {"agent", "steering", "wander"}
    try:
        agent = AgentConfig(**raw.get("agent", {}))
        steering = SteeringConfig(**raw.get("steering", {}))
        wander = WanderConfig(**raw.get("wander", {}))
        sim_values = {k: v for k, v in raw.items() if k not in sections}
        return SimulationConfig(agent=agent, steering=steering, wander=wander, **sim_values)
    except TypeError as exc:
        raise ConfigError(f"unknown configuration key: {exc}") from exc
