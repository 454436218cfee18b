"""Continuous-space sampling of the concentration field."""

import math
from dataclasses import dataclass
from typing import Tuple

from .grid import ChemicalGrid, CellType, WALL_CONCENTRATION

# Closest distance used for the wall penalty, so a point on a wall center stays finite
MIN_WALL_DISTANCE = 1e-3


@dataclass(frozen=True)
class FieldProbe:
    """Result of one field query, kept for overlays and tests."""
    point: Tuple[float, float]
    corners: Tuple[Tuple[int, int], ...]  # (x1,y1), (x1,y2), (x2,y1), (x2,y2)
    corner_values: Tuple[float, ...]
    corner_walls: Tuple[bool, ...]
    value: float


def _axis_fraction(p: float, c1: int, c2: int) -> float:
    """Fraction of the way from cell c1's center to cell c2's center."""
    if c1 == c2:
        # Coincident coordinates: no interpolation on this axis
        return 0.0
    return (p - (c1 + 0.5)) / (c2 - c1)


class FieldSampler:
    """
    Answers concentration queries at arbitrary points by bilinear
    interpolation between the four nearest cell centers.

    Wall corners (including anything off the grid) carry no weight and the
    weights of the remaining corners are renormalized. Each wall corner then
    lowers the result by wall_avoidance_rate / manhattan_distance, which is
    what pushes robots away from walls. With blend_wall_sentinel=True the
    wall sentinel is blended into the interpolation instead.
    """

    def __init__(self, grid: ChemicalGrid, wall_avoidance_rate: float = 0.0,
                 blend_wall_sentinel: bool = False):
        self.grid = grid
        self.wall_avoidance_rate = wall_avoidance_rate
        self.blend_wall_sentinel = blend_wall_sentinel

    def probe(self, px: float, py: float) -> FieldProbe:
        """Full query result. Non-finite points read as wall with no corners."""
        if not (math.isfinite(px) and math.isfinite(py)):
            return FieldProbe(point=(px, py), corners=(), corner_values=(),
                              corner_walls=(), value=WALL_CONCENTRATION)

        grid = self.grid
        x1, y1 = grid.cell_of(px, py)

        # Quadrant neighbor: the side of the base cell's center the point is on
        x2 = x1 + 1 if px >= x1 + 0.5 else x1 - 1
        y2 = y1 + 1 if py >= y1 + 0.5 else y1 - 1

        tx = _axis_fraction(px, x1, x2)
        ty = _axis_fraction(py, y1, y2)

        corners = ((x1, y1), (x1, y2), (x2, y1), (x2, y2))
        weights = (
            (1 - tx) * (1 - ty),
            (1 - tx) * ty,
            tx * (1 - ty),
            tx * ty,
        )
        values = tuple(grid.concentration_at(cx, cy) for cx, cy in corners)
        walls = tuple(grid.classification_at(cx, cy) == CellType.WALL
                      for cx, cy in corners)

        if self.blend_wall_sentinel:
            value = sum(w * v for w, v in zip(weights, values))
        else:
            total = sum(w for w, wall in zip(weights, walls) if not wall)
            if total > 0:
                value = sum(w * v for w, v, wall in zip(weights, values, walls)
                            if not wall) / total
            else:
                value = WALL_CONCENTRATION

        if self.wall_avoidance_rate:
            for (cx, cy), wall in zip(corners, walls):
                if wall:
                    distance = abs(px - (cx + 0.5)) + abs(py - (cy + 0.5))
                    value -= self.wall_avoidance_rate / max(distance, MIN_WALL_DISTANCE)

        return FieldProbe(
            point=(px, py),
            corners=corners,
            corner_values=values,
            corner_walls=walls,
            value=float(value),
        )

    def sample(self, px: float, py: float) -> float:
        """Concentration at a continuous point."""
        return self.probe(px, py).value
