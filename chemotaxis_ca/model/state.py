"""State snapshot dataclasses for the chemotaxis simulation."""

from dataclasses import dataclass, asdict, fields
from typing import List, Dict, Any
import numpy as np


@dataclass(frozen=True)
class RobotSnapshot:
    """Immutable snapshot of a robot's pose at a given tick."""
    agent_id: int
    x: float
    y: float
    heading: float
    turn_direction: int
    c_left: float
    c_right: float


# Trajectory log columns: the tick, then one column per snapshot field
CSV_FIELDS = ('step',) + tuple(f.name for f in fields(RobotSnapshot))


@dataclass
class SimulationState:
    """Complete snapshot of simulation state at a given tick."""
    step: int
    robots: List[RobotSnapshot]
    concentration: np.ndarray   # Copy of the concentration field, [y, x]
    metrics: Dict[str, float]

    def to_csv_rows(self) -> List[Dict[str, Any]]:
        """One row per robot, keyed by CSV_FIELDS."""
        return [{'step': self.step, **asdict(r)} for r in self.robots]
