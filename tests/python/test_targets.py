from __future__ import annotations

from pygame.math import Vector2

from insectswarm.sim.core.config import SimulationConfig, WanderConfig
from insectswarm.sim.core.noise import NoiseField
from insectswarm.sim.core.rng import DeterministicRng
from insectswarm.sim.core.targets import SwarmTargets


def _targets(config: SimulationConfig, seed: int = 9) -> SwarmTargets:
    return SwarmTargets(config, NoiseField(seed), DeterministicRng(seed))


def test_one_target_per_swarm_seeded_inside_domain():
    config = SimulationConfig(num_swarms=4)
    targets = _targets(config)
    assert len(targets) == 4
    for position in targets.positions:
        assert 0.0 <= position.x <= config.width
        assert 0.0 <= position.y <= config.height


def test_drift_stays_within_range_of_center():
    config = SimulationConfig(num_swarms=3)
    wander = config.wander
    targets = _targets(config)
    for tick in range(0, 200000, 97):
        targets.update(tick)
        for position in targets.positions:
            assert abs(position.x - config.width / 2) <= wander.range_x / 2 + 1e-9
            assert abs(position.y - config.height / 2) <= wander.range_y / 2 + 1e-9


def test_drift_is_slow_per_tick():
    config = SimulationConfig(num_swarms=2)
    targets = _targets(config)
    previous = [Vector2(p) for p in targets.compute(0)]
    total = 0.0
    steps = 3000
    for tick in range(1, steps + 1):
        current = targets.compute(tick)
        for before, after in zip(previous, current):
            moved = before.distance_to(after)
            assert moved < 1.5
            total += moved
        previous = current
    assert total / (steps * 2) < 1.0


def test_swarms_get_different_targets():
    config = SimulationConfig(num_swarms=3)
    positions = _targets(config).compute(500)
    assert positions[0] != positions[1]
    assert positions[1] != positions[2]


def test_compute_does_not_mutate_until_commit():
    config = SimulationConfig(num_swarms=2)
    targets = _targets(config)
    before = [Vector2(p) for p in targets.positions]
    computed = targets.compute(42)
    assert targets.positions == before

    targets.commit(computed)
    assert targets.positions == computed


def test_zero_ranges_pin_targets_to_center():
    config = SimulationConfig(num_swarms=2, wander=WanderConfig(range_x=0.0, range_y=0.0))
    targets = _targets(config)
    targets.update(1234)
    for position in targets.positions:
        assert position == Vector2(config.width / 2, config.height / 2)
