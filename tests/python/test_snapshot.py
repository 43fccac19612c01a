from __future__ import annotations

import pytest

from insectswarm.sim.core.agent import swarm_color
from insectswarm.sim.core.simulation import Simulation
from insectswarm.sim.types.snapshot import AgentView, StaleSnapshotError


def test_snapshot_yields_render_views(small_config):
    simulation = Simulation(small_config)
    snapshot = simulation.snapshot()

    assert len(snapshot) == len(simulation.agents)
    views = list(snapshot)
    assert all(isinstance(view, AgentView) for view in views)
    for view, agent in zip(views, simulation.agents):
        assert (view.x, view.y) == (agent.position.x, agent.position.y)
        assert view.size == small_config.agent.size
        assert view.color == swarm_color(agent.swarm_id)
        assert view.swarm_id == agent.swarm_id


def test_snapshot_is_restartable(small_config):
    simulation = Simulation(small_config)
    simulation.tick()
    snapshot = simulation.snapshot()
    assert list(snapshot) == list(snapshot)
    assert snapshot.tick == 1


def test_snapshot_is_lazy_and_read_only(small_config):
    simulation = Simulation(small_config)
    snapshot = simulation.snapshot()
    view = next(iter(snapshot))
    with pytest.raises(AttributeError):
        view.x = 5.0  # type: ignore[misc]
    assert simulation.agents[0].position.x != 5.0


def test_snapshot_goes_stale_after_tick(small_config):
    simulation = Simulation(small_config)
    snapshot = simulation.snapshot()
    assert not snapshot.stale

    simulation.tick()
    assert snapshot.stale
    with pytest.raises(StaleSnapshotError):
        list(snapshot)

    fresh = simulation.snapshot()
    assert len(list(fresh)) == len(simulation.agents)


def test_partially_consumed_snapshot_stops_after_tick(small_config):
    simulation = Simulation(small_config)
    iterator = iter(simulation.snapshot())
    next(iterator)
    simulation.tick()
    with pytest.raises(StaleSnapshotError):
        next(iterator)


def test_snapshot_goes_stale_after_reset(small_config):
    simulation = Simulation(small_config)
    snapshot = simulation.snapshot()
    simulation.reset()
    with pytest.raises(StaleSnapshotError):
        snapshot.to_payload()


def test_payload_is_json_friendly(small_config):
    simulation = Simulation(small_config)
    payload = simulation.snapshot().to_payload()
    assert set(payload[0]) == {"x", "y", "size", "color", "swarm"}
    assert payload[0]["color"] == list(swarm_color(0))
