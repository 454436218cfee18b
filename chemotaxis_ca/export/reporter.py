"""Summary report generation for the chemotaxis simulation."""

from typing import List, Dict, Optional, TYPE_CHECKING
from pathlib import Path

if TYPE_CHECKING:
    from ..model.state import SimulationState


class Reporter:
    """Generates summary statistics and formatted text report."""

    def __init__(self, config_path: str, seed: Optional[int]):
        self.config_path = config_path
        self.seed = seed
        self.step_metrics: List[Dict] = []
        self.turns = {-1: 0, 0: 0, 1: 0}
        self.peak_robot_concentration = 0.0

    def update(self, state: "SimulationState") -> None:
        """Accumulate metrics per step."""
        self.step_metrics.append(state.metrics.copy())

        for r in state.robots:
            self.turns[r.turn_direction] = self.turns.get(r.turn_direction, 0) + 1

        current = state.metrics.get('mean_robot_concentration', 0)
        if current > self.peak_robot_concentration:
            self.peak_robot_concentration = current

    def generate_summary(self, final_state: "SimulationState",
                         summary: Dict,
                         output_dir: Path,
                         csv_enabled: bool,
                         snapshot_enabled: bool,
                         gif_enabled: bool) -> str:
        """Returns formatted text report."""
        metrics = final_state.metrics
        total_turns = sum(self.turns.values())

        def share(direction: int) -> float:
            return self.turns[direction] / total_turns * 100 if total_turns else 0.0

        lines = [
            "",
            "=" * 80,
            "                    CHEMOTAXIS SIMULATION REPORT",
            "=" * 80,
            f"Configuration: {self.config_path}",
            f"Random Seed: {self.seed if self.seed is not None else 'None (random)'}",
            "",
            "SIMULATION METRICS",
            "-" * 40,
            f"Total Ticks:              {final_state.step}",
            f"Diffusion Steps:          {summary.get('diffusion_steps', 0)}",
            f"Robots:                   {int(metrics.get('robots', 0))}",
            f"Mean Concentration:       {metrics.get('mean_concentration', 0):.4f}",
            f"Mean Robot Concentration: {metrics.get('mean_robot_concentration', 0):.4f}",
            f"Peak Robot Concentration: {self.peak_robot_concentration:.4f}",
            f"Active Cell Total:        {summary.get('initial_concentration', 0):.3f}"
            f" -> {summary.get('final_concentration', 0):.3f}",
            "",
            "STEERING",
            "-" * 40,
            f"Left Turns:     {self.turns[1]} ({share(1):.1f}%)",
            f"Right Turns:    {self.turns[-1]} ({share(-1):.1f}%)",
            f"Straight:       {self.turns[0]} ({share(0):.1f}%)",
            "",
            "OUTPUT FILES",
            "-" * 40,
        ]

        if csv_enabled:
            lines.append(f"CSV Log:    {output_dir / 'simulation_log.csv'}")
        else:
            lines.append("CSV Log:    (disabled)")

        if snapshot_enabled:
            lines.append(f"Snapshot:   {output_dir / 'final_state.png'}")
        else:
            lines.append("Snapshot:   (disabled)")

        if gif_enabled:
            lines.append(f"Animation:  {output_dir / 'simulation.gif'}")
        else:
            lines.append("Animation:  (disabled)")

        lines.append("=" * 80)

        return "\n".join(lines)
