import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

ROOT = Path(__file__).resolve().parents[2]
src_root = ROOT / "src"
if str(src_root) not in sys.path:
    sys.path.insert(0, str(src_root))

from insectswarm.sim.core.config import AgentConfig, SimulationConfig  # noqa: E402


@pytest.fixture
def small_config() -> SimulationConfig:
    return SimulationConfig(num_swarms=3, agents_per_swarm=20, seed=1234)


@pytest.fixture
def fast_config() -> SimulationConfig:
    # Large speeds on a small domain so agents cross the edges often.
    return SimulationConfig(
        num_swarms=2,
        agents_per_swarm=15,
        width=120.0,
        height=90.0,
        seed=77,
        agent=AgentConfig(max_speed=35.0, max_force=9.0, initial_speed=30.0),
    )
