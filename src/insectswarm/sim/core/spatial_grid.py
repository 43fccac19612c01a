from __future__ import annotations

import math
from typing import TYPE_CHECKING, Dict, List, Tuple

from pygame.math import Vector2

if TYPE_CHECKING:
    from .agent import Agent


class SpatialGrid:
    """Uniform bucket grid over agent positions.

    Lookups return every agent in the cells covering a radius, without a
    distance test; callers apply their own (strict) radius check.
    """

    def __init__(self, cell_size: float) -> None:
        self._cell_size = cell_size
        self._cells: Dict[Tuple[int, int], List["Agent"]] = {}
        self._active_keys: List[Tuple[int, int]] = []

    @property
    def cell_size(self) -> float:
        return self._cell_size

    def build_neighbor_cell_offsets(self, radius: float) -> List[Tuple[int, int]]:
        cell_range = int(math.ceil(radius / self._cell_size))
        return [(dx, dy) for dx in range(-cell_range, cell_range + 1) for dy in range(-cell_range, cell_range + 1)]

    def clear(self) -> None:
        for key in self._active_keys:
            bucket = self._cells.get(key)
            if bucket:
                bucket.clear()
        self._active_keys.clear()

    def insert(self, agent: "Agent") -> None:
        key = self._cell_key(agent.position)
        bucket = self._cells.get(key)
        if bucket is None:
            bucket = []
            self._cells[key] = bucket
            self._active_keys.append(key)
        elif not bucket:
            # Bucket exists but was cleared at the start of this tick; mark it active again.
            self._active_keys.append(key)
        bucket.append(agent)

    def collect_candidates(
        self,
        position: Vector2,
        cell_offsets: List[Tuple[int, int]],
        out_agents: List["Agent"],
    ) -> None:
        """Fill ``out_agents`` with the occupants of the offset cells around ``position``, in index order."""
        out_agents.clear()
        base_x, base_y = self._cell_key(position)
        cells = self._cells
        for dx, dy in cell_offsets:
            bucket = cells.get((base_x + dx, base_y + dy))
            if bucket:
                out_agents.extend(bucket)
        out_agents.sort(key=_agent_index)

    def _cell_key(self, position: Vector2) -> Tuple[int, int]:
        return (int(position.x // self._cell_size), int(position.y // self._cell_size))


def _agent_index(agent: "Agent") -> int:
    return agent.index
