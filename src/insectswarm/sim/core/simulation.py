from __future__ import annotations

import logging
import math
import threading
from dataclasses import replace
from time import perf_counter
from typing import List, Optional

from pygame.math import Vector2

from .agent import Agent
from .config import SimulationConfig
from .noise import NoiseField
from .rng import DeterministicRng, derive_stream_seed
from .spatial_grid import SpatialGrid
from .targets import SwarmTargets
from ..systems import metrics as metrics_system
from ..systems import steering, swarms
from ..systems.steering import ForceBreakdown
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot
from ..utils.math2d import _clamp_length_xy_f

logger = logging.getLogger(__name__)

_NOISE_RNG_SALT = 0x9E3779B97F4A7C15


class Simulation:
    """Owns the swarm population and its wandering targets and advances them one tick at a time.

    Every tick reads the start-of-tick state of all agents to compute their
    steering forces and only then integrates, so no agent observes another
    agent's update from the same tick.
    """

    def __init__(self, config: SimulationConfig):
        self._config = config.validate()
        self._rng = DeterministicRng(config.seed)
        self._noise = NoiseField(
            derive_stream_seed(config.seed, _NOISE_RNG_SALT),
            octaves=config.wander.octaves,
            falloff=config.wander.falloff,
        )
        cell_size = config.steering.max_radius
        self._grid = SpatialGrid(cell_size if cell_size > 0.0 else 1.0)
        self._cell_offsets = self._grid.build_neighbor_cell_offsets(cell_size)
        self._candidates: List[Agent] = []
        self._mates: List[Agent] = []
        self._others: List[Agent] = []
        self._tick_lock = threading.Lock()
        self._version = 0
        self._tick_count = 0
        self._metrics: TickMetrics | None = None
        self._agents: List[Agent] = []
        self._targets = self._bootstrap()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def targets(self) -> SwarmTargets:
        return self._targets

    @property
    def tick_count(self) -> int:
        return self._tick_count

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    def reset(self) -> None:
        if not self._tick_lock.acquire(blocking=False):
            raise RuntimeError("Simulation.reset() cannot run while a tick is in progress")
        try:
            self._rng.reset()
            self._tick_count = 0
            self._metrics = None
            self._version += 1
            self._targets = self._bootstrap()
        finally:
            self._tick_lock.release()

    def tick(self) -> TickMetrics:
        if not self._tick_lock.acquire(blocking=False):
            raise RuntimeError("Simulation.tick() is not reentrant")
        try:
            return self._step()
        finally:
            self._tick_lock.release()

    def snapshot(self) -> Snapshot:
        return Snapshot(self._agents, self._tick_count, self._version, self._current_version)

    def force_breakdown(self, index: int, targets: Optional[List[Vector2]] = None) -> ForceBreakdown:
        """Unweighted forces on agent ``index`` for the current state, without advancing."""
        agent = self._agents[index]
        if targets is None:
            targets = self._targets.positions
        members = swarms.partition(self._agents, self._config.num_swarms)
        return steering.compute_forces(
            agent,
            members.members[agent.swarm_id],
            members.others[agent.swarm_id],
            targets[agent.swarm_id],
            self._config.steering,
        )

    def _current_version(self) -> int:
        return self._version

    def _step(self) -> TickMetrics:
        start = perf_counter()
        tick = self._tick_count + 1
        targets = self._targets.compute(tick)
        accelerations, neighbor_checks = self._compute_accelerations(targets)

        # Nothing has been mutated up to here; an exception above leaves the pre-tick state intact.
        self._targets.commit(targets)
        width = self._config.width
        height = self._config.height
        for agent, acceleration in zip(self._agents, accelerations):
            self._integrate(agent, acceleration, width, height)
        self._tick_count = tick
        self._version += 1

        elapsed_ms = (perf_counter() - start) * 1000.0
        metrics = metrics_system.create_metrics(
            tick, self._agents, self._targets.positions, neighbor_checks, elapsed_ms
        )
        self._metrics = metrics
        logger.debug(
            "tick %d: %d agents, %d neighbor checks, %.3f ms",
            tick,
            metrics.population,
            neighbor_checks,
            elapsed_ms,
        )
        return metrics

    def _compute_accelerations(self, targets: List[Vector2]) -> tuple[List[Vector2], int]:
        config = self._config
        steering_config = config.steering
        accelerations: List[Vector2] = []
        neighbor_checks = 0

        if config.use_spatial_grid:
            grid = self._grid
            grid.clear()
            for agent in self._agents:
                grid.insert(agent)
            candidates = self._candidates
            mates = self._mates
            others = self._others
            for agent in self._agents:
                grid.collect_candidates(agent.position, self._cell_offsets, candidates)
                swarms.split_candidates(agent.swarm_id, candidates, mates, others)
                neighbor_checks += len(candidates)
                forces = steering.compute_forces(agent, mates, others, targets[agent.swarm_id], steering_config)
                accelerations.append(forces.weighted_sum(steering_config))
        else:
            partition = swarms.partition(self._agents, config.num_swarms)
            for agent in self._agents:
                mates = partition.members[agent.swarm_id]
                others = partition.others[agent.swarm_id]
                neighbor_checks += len(mates) + len(others)
                forces = steering.compute_forces(agent, mates, others, targets[agent.swarm_id], steering_config)
                accelerations.append(forces.weighted_sum(steering_config))
        return accelerations, neighbor_checks

    @staticmethod
    def _integrate(agent: Agent, acceleration: Vector2, width: float, height: float) -> None:
        agent.acceleration.update(acceleration.x, acceleration.y)
        vel_x, vel_y = _clamp_length_xy_f(
            agent.velocity.x + agent.acceleration.x,
            agent.velocity.y + agent.acceleration.y,
            agent.max_speed,
        )
        pos_x = Simulation._wrap(agent.position.x + vel_x, width)
        pos_y = Simulation._wrap(agent.position.y + vel_y, height)
        agent.velocity.update(vel_x, vel_y)
        agent.position.update(pos_x, pos_y)
        agent.acceleration.update(0.0, 0.0)

    @staticmethod
    def _wrap(value: float, extent: float) -> float:
        """Teleport across a toroidal edge so the result lies in ``[0, extent)``."""
        if value >= extent:
            return 0.0
        if value < 0.0:
            return math.nextafter(extent, 0.0)
        return value

    def _bootstrap(self) -> SwarmTargets:
        config = self._config
        targets = SwarmTargets(config, self._noise, self._rng)
        agents: List[Agent] = []
        for swarm_id in range(config.num_swarms):
            for _ in range(config.agents_per_swarm):
                position = Vector2(
                    self._rng.next_range(0.0, config.width),
                    self._rng.next_range(0.0, config.height),
                )
                velocity = self._rng.next_unit_circle() * config.agent.initial_speed
                agents.append(
                    Agent(
                        index=len(agents),
                        swarm_id=swarm_id,
                        position=Vector2(self._wrap(position.x, config.width), self._wrap(position.y, config.height)),
                        velocity=velocity,
                        max_speed=config.agent.max_speed,
                        max_force=config.agent.max_force,
                        size=config.agent.size,
                    )
                )
        self._agents = agents
        logger.info(
            "built %d swarms x %d agents on a %gx%g domain (seed=%d)",
            config.num_swarms,
            config.agents_per_swarm,
            config.width,
            config.height,
            config.seed,
        )
        return targets


def initialize(
    num_swarms: int,
    agents_per_swarm: int,
    width: float,
    height: float,
    seed: int,
    config: Optional[SimulationConfig] = None,
) -> Simulation:
    """Build a :class:`Simulation` for the given population and domain.

    Any other settings come from ``config`` (defaults when omitted). Invalid
    values raise :class:`~insectswarm.sim.core.config.ConfigError`.
    """
    base = config if config is not None else SimulationConfig()
    return Simulation(
        replace(
            base,
            num_swarms=num_swarms,
            agents_per_swarm=agents_per_swarm,
            width=width,
            height=height,
            seed=seed,
        )
    )
