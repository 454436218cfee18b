"""Heatmap snapshots and animation for the chemotaxis simulation."""

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend
import matplotlib.pyplot as plt
from matplotlib.colors import to_rgb
from pathlib import Path
from typing import List, TYPE_CHECKING
from PIL import Image
import io

if TYPE_CHECKING:
    from ..model.grid import ChemicalGrid
    from ..model.state import SimulationState


class Visualizer:
    """
    Renders the concentration field as a blue (0) to red (1) heatmap with
    walls in white, robots as dots and their sensor rays as lines.

    Supports:
    - Single PNG snapshots
    - Animated GIF compilation
    """

    COLORS = {
        'low': '#0000FF',
        'high': '#FF0000',
        'wall': '#FFFFFF',
        'robot': '#F1C40F',
        'sensor': '#F39C12',
    }

    def __init__(self, grid: "ChemicalGrid", sensor_distance: float = 0.0):
        self.width = grid.width
        self.height = grid.height
        self.walls = ~grid.active_mask()
        self.sensor_distance = sensor_distance
        self.frames: List[Image.Image] = []

    def field_rgb(self, concentration: np.ndarray) -> np.ndarray:
        """Map a concentration field to an (H, W, 3) image."""
        c = np.clip(concentration, 0.0, 1.0)[:, :, np.newaxis]
        low = np.array(to_rgb(self.COLORS['low']))
        high = np.array(to_rgb(self.COLORS['high']))
        rgb = (1 - c) * low + c * high
        rgb[self.walls] = to_rgb(self.COLORS['wall'])
        return rgb

    def _create_figure(self, state: "SimulationState") -> plt.Figure:
        """Create matplotlib figure for state visualization."""
        aspect = self.width / self.height
        fig_height = 6
        fig_width = max(6, fig_height * aspect)
        fig, ax = plt.subplots(figsize=(fig_width, fig_height))

        # Cell (x, y) covers [x, x+1) x [y, y+1)
        ax.imshow(self.field_rgb(state.concentration), origin='lower',
                  aspect='equal', extent=[0, self.width, 0, self.height])

        d = self.sensor_distance
        for r in state.robots:
            fx, fy = np.cos(r.heading), np.sin(r.heading)
            rx, ry = fy, -fx
            if d > 0:
                for sign in (-1, 1):
                    sx = r.x + d * (fx + sign * rx)
                    sy = r.y + d * (fy + sign * ry)
                    ax.plot([r.x, sx], [r.y, sy], '-', color=self.COLORS['sensor'],
                            linewidth=0.8)
            ax.plot(r.x, r.y, 'o', color=self.COLORS['robot'],
                    markersize=5, markeredgecolor='black', markeredgewidth=0.3)

        ax.set_title(f"Step {state.step} | Mean concentration: "
                     f"{state.metrics.get('mean_concentration', 0):.3f}")
        ax.set_xlabel('X')
        ax.set_ylabel('Y')
        ax.set_xlim(0, self.width)
        ax.set_ylim(0, self.height)

        plt.tight_layout()
        return fig

    def buffer_frame(self, state: "SimulationState") -> None:
        """Store frame for GIF generation."""
        fig = self._create_figure(state)

        buf = io.BytesIO()
        fig.savefig(buf, format='png', dpi=80)
        buf.seek(0)
        img = Image.open(buf).copy()
        self.frames.append(img)
        buf.close()
        plt.close(fig)

    def save_snapshot(self, state: "SimulationState", output_path: Path) -> None:
        """Save single PNG image of current state."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        fig = self._create_figure(state)
        fig.savefig(output_path, dpi=150, bbox_inches='tight')
        plt.close(fig)

    def generate_gif(self, output_path: Path, fps: int = 10) -> None:
        """Compile buffered frames into animated GIF."""
        if not self.frames:
            return

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        duration = int(1000 / fps)  # milliseconds per frame

        self.frames[0].save(
            output_path,
            save_all=True,
            append_images=self.frames[1:],
            duration=duration,
            loop=0
        )
