import asyncio

import pytest
from fastapi.testclient import TestClient

from insectswarm.app.server import SimulationController, create_app
from insectswarm.sim.core.config import AppConfig, ConfigError, SimulationConfig


def _controller() -> SimulationController:
    return SimulationController(AppConfig(simulation=SimulationConfig(num_swarms=2, agents_per_swarm=5)))


def test_snapshot_queue_ack_cleanup() -> None:
    controller = _controller()

    async def exercise() -> None:
        await controller.step()
        await controller.step()
        async with controller._queue_lock:
            queued_ticks = [item.tick for item in controller._snapshot_queue]
        assert queued_ticks == [1, 2]
        await controller.acknowledge(1)
        async with controller._queue_lock:
            remaining_ticks = [item.tick for item in controller._snapshot_queue]
        assert remaining_ticks == [2]

    asyncio.run(exercise())


def test_snapshot_queue_is_bounded_without_acks() -> None:
    controller = SimulationController(
        AppConfig(
            simulation=SimulationConfig(num_swarms=1, agents_per_swarm=2),
            snapshot_queue_limit=8,
        )
    )

    async def exercise() -> None:
        for _ in range(50):
            await controller.step()
        async with controller._queue_lock:
            queued_ticks = [item.tick for item in controller._snapshot_queue]
        assert queued_ticks == list(range(43, 51))

    asyncio.run(exercise())


@pytest.mark.parametrize("limit", [0, -3, 2.5, True])
def test_snapshot_queue_limit_must_be_positive(limit) -> None:
    with pytest.raises(ConfigError, match="snapshot_queue_limit"):
        SimulationController(AppConfig(snapshot_queue_limit=limit))


def test_status_and_snapshot_endpoints() -> None:
    controller = _controller()
    client = TestClient(create_app(controller, autostart=False))

    status = client.get("/api/status").json()
    assert status == {"running": False, "tick": 0, "population": 10, "metrics": None}

    asyncio.run(controller.step())
    payload = client.get("/api/snapshot").json()
    assert payload["tick"] == 1
    assert len(payload["agents"]) == 10
    assert payload["world"] == {"width": 800.0, "height": 600.0}
    assert len(payload["targets"]) == 2
    assert payload["metrics"]["population"] == 10


def test_control_endpoints() -> None:
    controller = _controller()
    client = TestClient(create_app(controller, autostart=False))

    assert client.post("/api/control/start").json() == {"running": True}
    assert controller.running
    assert client.post("/api/control/stop").json() == {"running": False}
    assert client.post("/api/control/speed", json={"multiplier": 50}).json() == {"multiplier": 5.0}

    asyncio.run(controller.step())
    reset = client.post("/api/control/reset").json()
    assert reset == {"running": False, "tick": 0}


def test_websocket_streams_snapshots_and_accepts_acks() -> None:
    controller = _controller()
    client = TestClient(create_app(controller, autostart=False))

    with client.websocket_connect("/ws") as websocket:
        message = websocket.receive_json()
        assert message["type"] == "snapshot"
        assert message["tick"] == 0
        assert len(message["payload"]["agents"]) == 10
        websocket.send_text("not json")
        websocket.send_json({"type": "ack", "tick": 0})
