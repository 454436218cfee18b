"""Chemical grid management for the chemotaxis simulation."""

import logging
import math
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

# Concentration stored in wall cells; samplers and renderers read it as "impassable".
WALL_CONCENTRATION = -1.0


class CellType(IntEnum):
    """Classification of a grid cell."""
    WALL = 0
    OPEN = 1
    SOURCE = 2
    SINK = 3


class Tile(Enum):
    """Tile kinds of the map asset. Value is the tile name."""
    WALL = "Wall"
    FULL = "Full"
    EMPTY = "Empty"
    SOURCE = "Source"
    SINK = "Sink"

    @property
    def cell_type(self) -> CellType:
        return _TILE_CELL_TYPES[self]

    @property
    def seed(self) -> float:
        """Initial concentration of a cell carrying this tile."""
        return _TILE_SEEDS[self]


_TILE_CELL_TYPES = {
    Tile.WALL: CellType.WALL,
    Tile.FULL: CellType.OPEN,
    Tile.EMPTY: CellType.OPEN,
    Tile.SOURCE: CellType.SOURCE,
    Tile.SINK: CellType.SINK,
}

_TILE_SEEDS = {
    Tile.WALL: WALL_CONCENTRATION,
    Tile.FULL: 1.0,
    Tile.EMPTY: 0.0,
    Tile.SOURCE: 1.0,
    Tile.SINK: 0.0,
}

# Von Neumann neighborhood (4-connected)
NEIGHBOR_OFFSETS = [(1, 0), (0, 1), (-1, 0), (0, -1)]


class ChemicalGrid:
    """
    Owns cell classification, the concentration field and open-neighbor adjacency.

    Coordinate convention: (x, y) for API, [y, x] for array indexing.
    Cell (x, y) covers the continuous square [x, x+1) x [y, y+1).
    Lookups outside the active set never raise; they report a wall.
    """

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid size must be positive, got {width}x{height}")
        self.width = width
        self.height = height

        # Everything starts as wall until initialize() classifies it
        self.cell_types = np.full((height, width), CellType.WALL, dtype=np.int8)
        self.concentration = np.full((height, width), WALL_CONCENTRATION,
                                     dtype=np.float64)

        self.active_cells: List[Tuple[int, int]] = []
        self.open_neighbors: Dict[Tuple[int, int], List[Tuple[int, int]]] = {}

    @classmethod
    def from_tiles(cls, tiles: Sequence[Sequence[Optional[Tile]]]) -> "ChemicalGrid":
        """Build a grid sized to the tile array (tiles[y][x]) and initialize it."""
        height = len(tiles)
        width = len(tiles[0]) if height else 0
        grid = cls(width, height)
        grid.initialize(tiles)
        return grid

    def initialize(self, tiles: Sequence[Sequence[Optional[Tile]]]) -> None:
        """
        Classify cells and seed concentrations from map tiles.

        tiles[y][x] is a Tile or None (no tile). None and Tile.WALL become
        walls at the sentinel concentration; every other tile becomes an
        active cell. Adjacency is computed once, here.
        """
        if len(tiles) != self.height or any(len(row) != self.width for row in tiles):
            raise ValueError(
                f"Tile array does not cover the {self.width}x{self.height} grid")

        self.cell_types.fill(CellType.WALL)
        self.concentration.fill(WALL_CONCENTRATION)
        self.active_cells = []

        for y, row in enumerate(tiles):
            for x, tile in enumerate(row):
                if tile is None or tile is Tile.WALL:
                    continue
                self.cell_types[y, x] = tile.cell_type
                self.concentration[y, x] = tile.seed
                self.active_cells.append((x, y))

        self.open_neighbors = {}
        for x, y in self.active_cells:
            self.open_neighbors[(x, y)] = [
                (x + dx, y + dy) for dx, dy in NEIGHBOR_OFFSETS
                if self.classification_at(x + dx, y + dy) != CellType.WALL
            ]

        logger.debug("Initialized %dx%d grid with %d active cells",
                     self.width, self.height, len(self.active_cells))

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def classification_at(self, x: int, y: int) -> CellType:
        """Return cell type; WALL for anything outside the grid."""
        if not self.in_bounds(x, y):
            return CellType.WALL
        return CellType(int(self.cell_types[y, x]))

    def is_active(self, x: int, y: int) -> bool:
        return self.classification_at(x, y) != CellType.WALL

    def concentration_at(self, x: int, y: int) -> float:
        """Return concentration; the wall sentinel for walls and out-of-range cells."""
        if not self.is_active(x, y):
            return WALL_CONCENTRATION
        return float(self.concentration[y, x])

    def deplete(self, x: int, y: int, rate: float) -> None:
        """Remove a fraction of the concentration at an active cell."""
        if rate == 0 or not self.is_active(x, y):
            return
        self.concentration[y, x] -= self.concentration[y, x] * rate

    def cell_of(self, px: float, py: float) -> Tuple[int, int]:
        """Cell containing a continuous point."""
        return int(math.floor(px)), int(math.floor(py))

    def cells_of_type(self, cell_type: CellType) -> List[Tuple[int, int]]:
        ys, xs = np.where(self.cell_types == cell_type)
        return [(int(x), int(y)) for x, y in zip(xs, ys)]

    def active_mask(self) -> np.ndarray:
        return self.cell_types != CellType.WALL

    def total_concentration(self) -> float:
        """Sum of concentration over active cells."""
        return float(np.sum(self.concentration[self.active_mask()]))
