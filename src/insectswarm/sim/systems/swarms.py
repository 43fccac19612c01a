from __future__ import annotations

from dataclasses import dataclass
from typing import List

from ..core.agent import Agent


@dataclass(slots=True)
class SwarmPartition:
    """Agents split by swarm for one tick, each list in population index order."""

    members: List[List[Agent]]
    others: List[List[Agent]]


def partition(agents: List[Agent], num_swarms: int) -> SwarmPartition:
    members: List[List[Agent]] = [[] for _ in range(num_swarms)]
    for agent in agents:
        members[agent.swarm_id].append(agent)
    others: List[List[Agent]] = []
    for swarm_id in range(num_swarms):
        others.append([agent for agent in agents if agent.swarm_id != swarm_id])
    return SwarmPartition(members=members, others=others)


def split_candidates(
    swarm_id: int, candidates: List[Agent], out_mates: List[Agent], out_others: List[Agent]
) -> None:
    out_mates.clear()
    out_others.clear()
    for other in candidates:
        if other.swarm_id == swarm_id:
            out_mates.append(other)
        else:
            out_others.append(other)
