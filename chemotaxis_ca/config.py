"""Configuration dataclasses and YAML loader for the chemotaxis simulation."""

from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Any, Optional, Union
from pathlib import Path
import yaml

from .model.grid import Tile

# Characters of the text tile map
TILE_CHARS: Dict[str, Optional[Tile]] = {
    '#': Tile.WALL,
    '.': Tile.EMPTY,
    'o': Tile.FULL,
    'S': Tile.SOURCE,
    'K': Tile.SINK,
    ' ': None,
}

CONTROLLERS = ("sensors", "gradient")


@dataclass
class DiffusionConfig:
    diffusion_rate: float         # per-pair transfer fraction, (0, 1]
    num_diffusion_steps: int = 1  # sub-steps per tick

    def __post_init__(self):
        if not 0 < self.diffusion_rate <= 1:
            raise ValueError(f"diffusion.rate must be in (0, 1], got {self.diffusion_rate}")
        if self.num_diffusion_steps < 0:
            raise ValueError(f"diffusion.num_steps must be >= 0, got {self.num_diffusion_steps}")


@dataclass
class RobotConfig:
    sensor_distance: float = 0.5     # cells
    turn_speed: float = 0.2          # radians per tick
    movement_speed: float = 0.1      # cells per tick
    noise_scale: float = 0.0
    depletion_rate: float = 0.0      # fraction removed per tick, [0, 1]
    wall_avoidance_rate: float = 1.0
    log_sensing: bool = True
    controller: str = "sensors"      # "sensors" or "gradient"

    def __post_init__(self):
        if not 0 <= self.depletion_rate <= 1:
            raise ValueError(f"robots.depletion_rate must be in [0, 1], got {self.depletion_rate}")
        if self.noise_scale < 0:
            raise ValueError(f"robots.noise_scale must be >= 0, got {self.noise_scale}")
        if self.controller not in CONTROLLERS:
            raise ValueError(f"Unknown controller: {self.controller}")


@dataclass
class LayoutConfig:
    tiles: List[List[Optional[Tile]]]  # tiles[y][x], y = 0 is the bottom row

    @property
    def width(self) -> int:
        return len(self.tiles[0])

    @property
    def height(self) -> int:
        return len(self.tiles)


@dataclass
class SimulationConfig:
    layout: LayoutConfig
    max_steps: int
    diffusion: DiffusionConfig
    robots: RobotConfig
    robot_count: int = 1
    robot_positions: List[Tuple[float, float]] = field(default_factory=list)
    blend_wall_sentinel: bool = False

    # Export flags (can be overridden by CLI)
    csv_enabled: bool = True
    snapshot_enabled: bool = True
    gif_enabled: bool = False
    quiet: bool = False
    seed: Optional[int] = None
    out_dir: Path = field(default_factory=lambda: Path("./output"))


def parse_tile_map(rows: Union[str, List[str]]) -> List[List[Optional[Tile]]]:
    """
    Parse a text tile map into tiles[y][x].

    The first text row is the top of the map (largest y). Short rows are
    padded with empty (no tile) cells, and a row of spaces is a row of
    walls. Only a block string has its leading and trailing blank lines
    trimmed.
    """
    if isinstance(rows, str):
        rows = rows.splitlines()
        while rows and not rows[0].strip():
            rows.pop(0)
        while rows and not rows[-1].strip():
            rows.pop()
    if not rows:
        raise ValueError("Map is empty")
    if not isinstance(rows, list) or not all(isinstance(r, str) for r in rows):
        raise ValueError("Map must be a block string or a list of strings")
    if max(len(r) for r in rows) == 0:
        raise ValueError("Map is empty")

    width = max(len(r) for r in rows)
    tiles = []
    for line_no, row in enumerate(rows):
        parsed = []
        for ch in row.ljust(width):
            if ch not in TILE_CHARS:
                raise ValueError(f"Unknown tile character {ch!r} in map row {line_no}")
            parsed.append(TILE_CHARS[ch])
        tiles.append(parsed)
    tiles.reverse()
    return tiles


def _parse_positions(positions_raw: List[Any]) -> List[Tuple[float, float]]:
    """Parse explicit robot start positions."""
    positions = []
    for p in positions_raw:
        if len(p) != 2:
            raise ValueError(f"Robot position must be [x, y], got {p}")
        positions.append((float(p[0]), float(p[1])))
    return positions


def _section(raw: Dict[str, Any], name: str, required: bool = False) -> Dict[str, Any]:
    """Return a config section; an empty YAML key reads as an empty section."""
    if required and name not in raw:
        raise ValueError(f"Missing required section: {name}")
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"Section {name} must be a mapping, got {type(section).__name__}")
    return section


def config_from_dict(raw: Dict[str, Any]) -> SimulationConfig:
    """Build a SimulationConfig from already-parsed YAML data."""
    if 'map' not in raw:
        raise ValueError("Missing required section: map")
    layout = LayoutConfig(tiles=parse_tile_map(raw['map']))

    diff_raw = _section(raw, 'diffusion', required=True)
    if 'rate' not in diff_raw:
        raise ValueError("diffusion.rate is required")
    diffusion = DiffusionConfig(
        diffusion_rate=diff_raw['rate'],
        num_diffusion_steps=diff_raw.get('num_steps', 1)
    )

    robots_raw = _section(raw, 'robots')
    robots = RobotConfig(
        sensor_distance=robots_raw.get('sensor_distance', 0.5),
        turn_speed=robots_raw.get('turn_speed', 0.2),
        movement_speed=robots_raw.get('movement_speed', 0.1),
        noise_scale=robots_raw.get('noise_scale', 0.0),
        depletion_rate=robots_raw.get('depletion_rate', 0.0),
        wall_avoidance_rate=robots_raw.get('wall_avoidance_rate', 1.0),
        log_sensing=robots_raw.get('log_sensing', True),
        controller=robots_raw.get('controller', 'sensors')
    )
    positions = _parse_positions(robots_raw.get('positions', []))
    robot_count = robots_raw.get('count', len(positions) or 1)
    if robot_count < 0:
        raise ValueError(f"robots.count must be >= 0, got {robot_count}")

    sim_raw = _section(raw, 'simulation')

    # Parse export config (optional)
    export_raw = _section(raw, 'export')

    return SimulationConfig(
        layout=layout,
        max_steps=sim_raw.get('max_steps', 500),
        diffusion=diffusion,
        robots=robots,
        robot_count=robot_count,
        robot_positions=positions,
        blend_wall_sentinel=robots_raw.get('blend_wall_sentinel', False),
        seed=sim_raw.get('seed'),
        csv_enabled=export_raw.get('csv', True),
        snapshot_enabled=export_raw.get('snapshot', True),
        gif_enabled=export_raw.get('gif', False)
    )


def load_config(config_path: Path) -> SimulationConfig:
    """Load and validate YAML configuration file."""
    with open(config_path) as f:
        raw = yaml.safe_load(f)
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration must be a mapping: {config_path}")
    return config_from_dict(raw)
