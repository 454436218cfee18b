"""Model package for the chemotaxis simulation."""

from .state import RobotSnapshot, SimulationState
from .grid import ChemicalGrid, CellType, Tile, WALL_CONCENTRATION
from .diffusion import DiffusionSolver
from .sampler import FieldSampler, FieldProbe
from .agent import Agent
from .engine import SimulationEngine

__all__ = [
    'RobotSnapshot',
    'SimulationState',
    'ChemicalGrid',
    'CellType',
    'Tile',
    'WALL_CONCENTRATION',
    'DiffusionSolver',
    'FieldSampler',
    'FieldProbe',
    'Agent',
    'SimulationEngine',
]
