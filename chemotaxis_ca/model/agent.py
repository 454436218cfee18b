"""Robot implementation with two-sensor bang-bang chemotaxis."""

import math
from typing import Tuple, TYPE_CHECKING
import numpy as np

from .grid import ChemicalGrid
from .sampler import FieldSampler

if TYPE_CHECKING:
    from ..config import RobotConfig

# Readings are clamped to this before log10 so the decision is always defined
LOG_SENSING_FLOOR = 1e-6

Point = Tuple[float, float]


class Agent:
    """
    Mobile robot that steers up a chemical gradient.

    Two sensors sit at position + d * (forward -/+ right). Each tick the
    robot compares the two readings, turns by turn_speed toward the higher
    one (left is a counterclockwise turn), moves forward and removes a
    fraction of the chemical in the cell it lands in:

        direction = sign(c_left - c_right + noise)                (linear)
        direction = sign(log10 c_left - log10 c_right + noise)    (log)

    Equal readings give direction 0, i.e. no turn.
    """

    def __init__(self, agent_id: int,
                 position: Point,
                 heading: float,
                 params: "RobotConfig"):
        self.id = agent_id
        self.position = (float(position[0]), float(position[1]))
        self.heading = float(heading)  # radians, counterclockwise from +x
        self.params = params

        self.last_turn_direction = 0
        self.last_readings: Tuple[float, float] = (0.0, 0.0)  # (left, right)
        self.steps_taken = 0

    @property
    def forward(self) -> Point:
        return math.cos(self.heading), math.sin(self.heading)

    @property
    def right(self) -> Point:
        """Forward rotated 90 degrees clockwise."""
        return math.sin(self.heading), -math.cos(self.heading)

    @property
    def cell(self) -> Tuple[int, int]:
        return int(math.floor(self.position[0])), int(math.floor(self.position[1]))

    def sensor_points(self) -> Tuple[Point, Point]:
        """Return (left, right) sensor endpoints."""
        px, py = self.position
        fx, fy = self.forward
        rx, ry = self.right
        d = self.params.sensor_distance
        left = (px + d * (fx - rx), py + d * (fy - ry))
        right = (px + d * (fx + rx), py + d * (fy + ry))
        return left, right

    def decide_turn(self, sampler: FieldSampler, rng: np.random.Generator) -> int:
        """Sample both sensors and return -1 (right), 0 or +1 (left)."""
        left, right = self.sensor_points()
        c_left = sampler.sample(*left)
        c_right = sampler.sample(*right)
        self.last_readings = (c_left, c_right)

        # Drawn every tick so the random stream does not depend on noise_scale
        noise = self.params.noise_scale * rng.uniform(-1.0, 1.0)

        if self.params.log_sensing:
            signal = (math.log10(max(c_left, LOG_SENSING_FLOOR))
                      - math.log10(max(c_right, LOG_SENSING_FLOOR))
                      + noise)
        else:
            signal = c_left - c_right + noise

        if not math.isfinite(signal):
            return 0
        return int(np.sign(signal))

    def step(self, grid: ChemicalGrid, sampler: FieldSampler,
             rng: np.random.Generator) -> int:
        """Advance one tick. Returns the turn direction taken."""
        if self.params.controller == "gradient":
            return self.gradient_step(grid, rng)

        direction = self.decide_turn(sampler, rng)

        self.heading = (self.heading + self.params.turn_speed * direction) % (2 * math.pi)
        fx, fy = self.forward
        speed = self.params.movement_speed
        self.position = (self.position[0] + speed * fx,
                         self.position[1] + speed * fy)

        grid.deplete(*self.cell, self.params.depletion_rate)

        self.last_turn_direction = direction
        self.steps_taken += 1
        return direction

    def gradient_step(self, grid: ChemicalGrid, rng: np.random.Generator) -> int:
        """
        Alternative controller: move along the forward-difference gradient
        of the four cells around the current one, plus noise drawn
        uniformly from a disk of radius noise_scale. Heading is untouched.
        """
        x, y = self.cell
        c0 = grid.concentration_at(x, y)
        gx = grid.concentration_at(x + 1, y) - c0
        gy = grid.concentration_at(x, y + 1) - c0

        angle = rng.uniform(0.0, 2 * math.pi)
        radius = self.params.noise_scale * math.sqrt(rng.uniform(0.0, 1.0))
        gx += radius * math.cos(angle)
        gy += radius * math.sin(angle)
        self.last_readings = (gx, gy)

        speed = self.params.movement_speed
        self.position = (self.position[0] + speed * gx,
                         self.position[1] + speed * gy)

        grid.deplete(*self.cell, self.params.depletion_rate)

        self.last_turn_direction = 0
        self.steps_taken += 1
        return 0

    def __repr__(self) -> str:
        return (f"Agent(id={self.id}, pos=({self.position[0]:.2f}, "
                f"{self.position[1]:.2f}), heading={self.heading:.2f})")
