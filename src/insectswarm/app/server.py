from __future__ import annotations

import asyncio
import json
import logging
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import asdict, dataclass
from typing import AsyncIterator, Dict, Optional, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..sim.core.config import AppConfig, ConfigError
from ..sim.core.simulation import Simulation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedSnapshot:
    tick: int
    payload: str


class SimulationController:
    """Drives a :class:`Simulation` at a fixed tick rate and streams snapshots to websocket renderers."""

    def __init__(self, config: AppConfig):
        self.config = config
        self.simulation = Simulation(config.simulation)
        self.broadcast_interval = max(1, config.broadcast_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        queue_limit = config.snapshot_queue_limit
        if isinstance(queue_limit, bool) or not isinstance(queue_limit, int) or queue_limit < 1:
            raise ConfigError(f"snapshot_queue_limit must be a positive integer, got {queue_limit!r}")
        self._snapshot_queue: deque[QueuedSnapshot] = deque(maxlen=queue_limit)
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: Optional[asyncio.Task] = None

    @property
    def tick(self) -> int:
        return self.simulation.tick_count

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def shutdown(self) -> None:
        self.running = False
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

    async def reset(self) -> None:
        async with self._lock:
            self.simulation.reset()
        async with self._queue_lock:
            self._snapshot_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        logger.info("simulation reset")
        await self._broadcast_snapshot()

    async def step(self) -> None:
        async with self._lock:
            self.simulation.tick()
        if self.tick % self.broadcast_interval == 0:
            await self._broadcast_snapshot()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(1.0 / (self.config.tick_rate * self.speed_multiplier))
            if not self.running:
                continue
            await self.step()

    async def acknowledge(self, tick: int) -> None:
        async with self._queue_lock:
            while self._snapshot_queue and self._snapshot_queue[0].tick <= tick:
                self._snapshot_queue.popleft()

    def snapshot_payload(self) -> dict:
        simulation = self.simulation
        metrics = simulation.metrics
        return {
            "tick": simulation.tick_count,
            "metrics": asdict(metrics) if metrics is not None else None,
            "agents": simulation.snapshot().to_payload(),
            "world": {"width": simulation.config.width, "height": simulation.config.height},
            "targets": [[target.x, target.y] for target in simulation.targets.positions],
        }

    def _serialize_snapshot(self) -> QueuedSnapshot:
        payload = self.snapshot_payload()
        message = {"type": "snapshot", "tick": payload["tick"], "payload": payload}
        return QueuedSnapshot(tick=payload["tick"], payload=json.dumps(message))

    async def _send_pending_snapshots(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._snapshot_queue if item.tick > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.tick
        self._client_last_sent[client] = last_sent

    async def _broadcast_snapshot(self) -> None:
        queued = self._serialize_snapshot()
        async with self._queue_lock:
            self._snapshot_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await self._send_pending_snapshots(client)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


def create_app(controller: SimulationController, autostart: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if autostart:
            await controller.start()
        yield
        await controller.shutdown()

    app = FastAPI(title="Insect Swarm Simulation", lifespan=lifespan)
    app.state.controller = controller

    @app.get("/api/status")
    async def status() -> JSONResponse:
        metrics = controller.simulation.metrics
        return JSONResponse(
            {
                "running": controller.running,
                "tick": controller.tick,
                "population": len(controller.simulation.agents),
                "metrics": asdict(metrics) if metrics is not None else None,
            }
        )

    @app.get("/api/snapshot")
    async def snapshot() -> JSONResponse:
        async with controller._lock:
            payload = controller.snapshot_payload()
        return JSONResponse(payload)

    @app.post("/api/control/start")
    async def start_simulation() -> JSONResponse:
        controller.running = True
        logger.info("simulation started")
        return JSONResponse({"running": True})

    @app.post("/api/control/stop")
    async def stop_simulation() -> JSONResponse:
        controller.running = False
        logger.info("simulation stopped")
        return JSONResponse({"running": False})

    @app.post("/api/control/reset")
    async def reset_simulation() -> JSONResponse:
        await controller.reset()
        return JSONResponse({"running": controller.running, "tick": controller.tick})

    @app.post("/api/control/speed")
    async def set_speed(payload: dict) -> JSONResponse:
        speed = float(payload.get("multiplier", 1.0))
        controller.speed_multiplier = max(0.1, min(5.0, speed))
        return JSONResponse({"multiplier": controller.speed_multiplier})

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        await websocket.accept()
        controller.clients.add(websocket)
        controller._client_last_sent[websocket] = -1
        logger.info("renderer connected (%d clients)", len(controller.clients))
        await controller._broadcast_snapshot()
        try:
            while True:
                message = await websocket.receive_text()
                try:
                    payload = json.loads(message)
                except json.JSONDecodeError:
                    continue
                if isinstance(payload, dict) and payload.get("type") == "ack":
                    tick = payload.get("tick")
                    if isinstance(tick, int):
                        await controller.acknowledge(tick)
        except WebSocketDisconnect:
            controller.clients.discard(websocket)
            controller._client_last_sent.pop(websocket, None)
            logger.info("renderer disconnected (%d clients)", len(controller.clients))

    return app


app = create_app(SimulationController(AppConfig()))

__all__ = ["app", "create_app", "SimulationController"]
