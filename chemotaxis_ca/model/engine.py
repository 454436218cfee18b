"""Simulation engine for the chemotaxis simulation."""

import logging
import math
import numpy as np
from typing import List, Dict, Tuple, TYPE_CHECKING

from .grid import ChemicalGrid, CellType
from .diffusion import DiffusionSolver
from .sampler import FieldSampler
from .agent import Agent
from .state import SimulationState, RobotSnapshot

if TYPE_CHECKING:
    from ..config import SimulationConfig

logger = logging.getLogger(__name__)


class SimulationEngine:
    """
    Orchestrates the tick-driven simulation loop.

    Each tick:
    1. Advance diffusion num_diffusion_steps times
    2. Step every robot once, in id order
    3. Return a state snapshot

    Diffusion finishes before any robot samples or depletes, and robots
    deplete in a fixed order, so a run is reproducible from its seed.
    """

    def __init__(self, config: "SimulationConfig"):
        self.config = config
        self.current_step = 0
        self.rng = np.random.default_rng(config.seed)

        self.grid = ChemicalGrid.from_tiles(config.layout.tiles)
        if not self.grid.active_cells:
            raise ValueError("Map has no active cells")

        self.solver = DiffusionSolver(self.grid, config.diffusion.diffusion_rate)
        self.sampler = FieldSampler(
            self.grid,
            config.robots.wall_avoidance_rate,
            blend_wall_sentinel=config.blend_wall_sentinel
        )

        self.initial_concentration = self.grid.total_concentration()

        self.agents: List[Agent] = []
        self._spawn_agents()
        logger.info("Engine ready: %d active cells, %d robots",
                    len(self.grid.active_cells), len(self.agents))

    def _spawn_agents(self) -> None:
        """Create robots at configured positions, or at random points in open cells."""
        positions: List[Tuple[float, float]] = list(self.config.robot_positions)

        open_cells = self.grid.cells_of_type(CellType.OPEN) or self.grid.active_cells
        while len(positions) < self.config.robot_count:
            x, y = open_cells[self.rng.integers(0, len(open_cells))]
            positions.append((x + self.rng.uniform(), y + self.rng.uniform()))

        for agent_id, pos in enumerate(positions, start=1):
            heading = self.rng.uniform(0.0, 2 * math.pi)
            self.agents.append(Agent(agent_id, pos, heading, self.config.robots))

    def step(self) -> SimulationState:
        """Execute one tick."""
        self.current_step += 1

        # Phase 1: diffusion
        self.solver.advance(self.config.diffusion.num_diffusion_steps)

        # Phase 2: robots, in id order
        for agent in self.agents:
            agent.step(self.grid, self.sampler, self.rng)

        return self._create_state_snapshot()

    def _create_state_snapshot(self) -> SimulationState:
        """Create snapshot of current simulation state."""
        robots = [
            RobotSnapshot(
                agent_id=a.id,
                x=a.position[0],
                y=a.position[1],
                heading=a.heading,
                turn_direction=a.last_turn_direction,
                c_left=a.last_readings[0],
                c_right=a.last_readings[1]
            )
            for a in self.agents
        ]

        open_mask = self.grid.cell_types == CellType.OPEN
        open_values = self.grid.concentration[open_mask]
        robot_values = [self.grid.concentration_at(*a.cell) for a in self.agents]
        on_field = [v for v in robot_values if v >= 0]

        metrics = {
            'total_concentration': float(np.sum(open_values)),
            'mean_concentration': float(np.mean(open_values)) if open_values.size else 0.0,
            'mean_robot_concentration': float(np.mean(on_field)) if on_field else 0.0,
            'robots_off_field': len(robot_values) - len(on_field),
            'robots': len(self.agents),
        }

        return SimulationState(
            step=self.current_step,
            robots=robots,
            concentration=self.grid.concentration.copy(),
            metrics=metrics
        )

    def is_finished(self) -> bool:
        """Check if simulation should terminate."""
        return self.current_step >= self.config.max_steps

    def get_summary(self) -> Dict:
        """Get summary statistics for the simulation."""
        return {
            'total_steps': self.current_step,
            'diffusion_steps': self.solver.steps_taken,
            'robots': len(self.agents),
            'initial_concentration': self.initial_concentration,
            'final_concentration': self.grid.total_concentration(),
        }
