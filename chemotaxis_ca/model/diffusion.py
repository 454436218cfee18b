"""Discrete diffusion solver over the active cells of a ChemicalGrid."""

import logging

import numpy as np
from scipy import sparse

from .grid import ChemicalGrid, CellType, WALL_CONCENTRATION

logger = logging.getLogger(__name__)


class DiffusionSolver:
    """
    Advances the concentration field by discrete transfer steps.

    Every OPEN cell c exchanges with each of its open neighbors n:
        transfer = rate * (C[c] - C[n]) / (len(open_neighbors[c]) + 1)
    which is taken from c and given to n. The +1 keeps one share back
    as if an extra wall neighbor withheld it. SINK cells are then forced
    to 0, SOURCE cells to 1 and walls to the sentinel.

    The rule is linear in C, so it is assembled once into a sparse
    operator L and a step is C' = C + rate * L @ C. Reads come from the
    front buffer only and writes go to a separate back buffer; the two
    are swapped after each full pass.
    """

    def __init__(self, grid: ChemicalGrid, diffusion_rate: float):
        if not 0 < diffusion_rate <= 1:
            raise ValueError(f"diffusion_rate must be in (0, 1], got {diffusion_rate}")
        self.grid = grid
        self.diffusion_rate = diffusion_rate
        self.steps_taken = 0

        self.operator = self._build_operator()
        self._back = np.empty_like(grid.concentration)

        self._source_mask = grid.cell_types == CellType.SOURCE
        self._sink_mask = grid.cell_types == CellType.SINK
        self._wall_mask = grid.cell_types == CellType.WALL

        if diffusion_rate > self.max_stable_rate():
            logger.warning(
                "diffusion_rate %.4f exceeds the stable rate %.4f for this map; "
                "open cells may leave [0, 1]",
                diffusion_rate, self.max_stable_rate())

    def _index(self, x: int, y: int) -> int:
        return y * self.grid.width + x

    def _build_operator(self) -> sparse.csr_matrix:
        """Assemble the per-pair transfer rule as an (N x N) sparse matrix."""
        grid = self.grid
        rows, cols, data = [], [], []

        for (x, y) in grid.active_cells:
            if grid.classification_at(x, y) != CellType.OPEN:
                continue
            neighbors = grid.open_neighbors[(x, y)]
            weight = 1.0 / (len(neighbors) + 1)
            c = self._index(x, y)
            for nx, ny in neighbors:
                n = self._index(nx, ny)
                # c loses w * (C[c] - C[n]), n gains the same amount
                rows += [c, c, n, n]
                cols += [c, n, c, n]
                data += [-weight, weight, weight, -weight]

        size = grid.width * grid.height
        operator = sparse.csr_matrix(
            (np.asarray(data, dtype=np.float64),
             (np.asarray(rows, dtype=np.int64), np.asarray(cols, dtype=np.int64))),
            shape=(size, size))
        logger.debug("Built diffusion operator with %d non-zeros", operator.nnz)
        return operator

    def max_stable_rate(self) -> float:
        """
        Largest rate for which every OPEN cell's update is a convex
        combination of pre-step values, keeping it inside [0, 1].
        """
        outflow = -self.operator.diagonal()
        open_mask = (self.grid.cell_types == CellType.OPEN).ravel()
        if not np.any(open_mask) or np.max(outflow[open_mask]) <= 0:
            return 1.0
        return float(min(1.0, 1.0 / np.max(outflow[open_mask])))

    def advance_one_step(self) -> None:
        """Apply one diffusion step to the grid's concentration field."""
        front = self.grid.concentration
        back = self._back

        front_flat = front.reshape(-1)
        back_flat = back.reshape(-1)
        np.copyto(back_flat, front_flat)
        back_flat += self.diffusion_rate * (self.operator @ front_flat)

        # Clamps override whatever was transferred in this step
        back[self._sink_mask] = 0.0
        back[self._source_mask] = 1.0
        back[self._wall_mask] = WALL_CONCENTRATION

        self.grid.concentration, self._back = back, front
        self.steps_taken += 1

    def advance(self, num_steps: int) -> None:
        """Run num_steps diffusion steps (one tick's worth)."""
        for _ in range(num_steps):
            self.advance_one_step()
