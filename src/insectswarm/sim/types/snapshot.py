from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterator, List

if TYPE_CHECKING:
    from ..core.agent import Agent, Color


class StaleSnapshotError(RuntimeError):
    """Raised when a snapshot is read after the simulation has moved on."""


@dataclass(frozen=True, slots=True)
class AgentView:
    x: float
    y: float
    size: float
    color: "Color"
    swarm_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "size": self.size, "color": list(self.color), "swarm": self.swarm_id}


class Snapshot:
    """Read-only, lazily evaluated view of the population at one tick.

    Iterating yields one :class:`AgentView` per agent and can be repeated any
    number of times until the simulation advances. After the next ``tick()``
    (or a ``reset()``) the snapshot is stale and iterating raises
    :class:`StaleSnapshotError`; fetch a new one instead.
    """

    __slots__ = ("_agents", "_tick", "_version", "_current_version")

    def __init__(
        self,
        agents: List["Agent"],
        tick: int,
        version: int,
        current_version: Callable[[], int],
    ) -> None:
        self._agents = agents
        self._tick = tick
        self._version = version
        self._current_version = current_version

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def stale(self) -> bool:
        return self._current_version() != self._version

    def __len__(self) -> int:
        return len(self._agents)

    def __iter__(self) -> Iterator[AgentView]:
        self._check_fresh()
        for agent in self._agents:
            self._check_fresh()
            position = agent.position
            yield AgentView(
                x=position.x,
                y=position.y,
                size=agent.size,
                color=agent.color,
                swarm_id=agent.swarm_id,
            )

    def to_payload(self) -> List[Dict[str, Any]]:
        return [view.to_dict() for view in self]

    def _check_fresh(self) -> None:
        if self.stale:
            raise StaleSnapshotError(
                f"snapshot taken at tick {self._tick} is stale; call snapshot() again after tick()"
            )
