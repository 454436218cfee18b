from __future__ import annotations

from pathlib import Path

import pytest

from chemotaxis_ca.config import (
    RobotConfig, DiffusionConfig, config_from_dict, load_config, parse_tile_map,
)
from chemotaxis_ca.model.grid import CellType, ChemicalGrid, Tile


def test_parse_tile_map_bottom_up() -> None:
    tiles = parse_tile_map(["#S", "oK", ". "])
    assert tiles[0] == [Tile.EMPTY, None]
    assert tiles[1] == [Tile.FULL, Tile.SINK]
    assert tiles[2] == [Tile.WALL, Tile.SOURCE]


def test_parse_tile_map_block_string_and_padding() -> None:
    tiles = parse_tile_map("###\n#.\n###\n")
    assert len(tiles) == 3
    assert tiles[1] == [Tile.WALL, Tile.EMPTY, None]


def test_parse_tile_map_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        parse_tile_map(["#?#"])
    with pytest.raises(ValueError):
        parse_tile_map([])


def test_rates_are_validated() -> None:
    with pytest.raises(ValueError):
        DiffusionConfig(diffusion_rate=0.0)
    with pytest.raises(ValueError):
        RobotConfig(depletion_rate=1.5)
    with pytest.raises(ValueError):
        RobotConfig(controller="random")


def test_defaults() -> None:
    config = config_from_dict({'diffusion': {'rate': 0.2}, 'map': ["..."]})
    assert config.max_steps == 500
    assert config.diffusion.num_diffusion_steps == 1
    assert config.robot_count == 1
    assert config.robots.log_sensing is True
    assert config.robots.controller == "sensors"
    assert config.seed is None
    assert config.layout.width == 3 and config.layout.height == 1


def test_load_config_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "sim.yaml"
    path.write_text(
        "simulation:\n"
        "  max_steps: 12\n"
        "  seed: 3\n"
        "diffusion:\n"
        "  rate: 0.25\n"
        "  num_steps: 4\n"
        "robots:\n"
        "  count: 2\n"
        "  turn_speed: 0.5\n"
        "  log_sensing: false\n"
        "  blend_wall_sentinel: true\n"
        "map:\n"
        "  - '#####'\n"
        "  - '#S.K#'\n"
        "  - '#####'\n"
        "export:\n"
        "  gif: true\n"
    )
    config = load_config(path)
    assert config.max_steps == 12
    assert config.seed == 3
    assert config.diffusion.diffusion_rate == 0.25
    assert config.diffusion.num_diffusion_steps == 4
    assert config.robot_count == 2
    assert config.robots.turn_speed == 0.5
    assert config.robots.log_sensing is False
    assert config.blend_wall_sentinel is True
    assert config.gif_enabled is True
    assert config.layout.tiles[1][1] == Tile.SOURCE


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ValueError):
        load_config(path)


def test_shipped_configs_load() -> None:
    configs = Path(__file__).resolve().parents[2] / "configs"
    for path in sorted(configs.glob("*.yaml")):
        config = load_config(path)
        assert config.layout.height > 0


def test_parse_tile_map_keeps_interior_space_rows() -> None:
    tiles = parse_tile_map(["o", " ", "."])
    assert len(tiles) == 3
    assert tiles[1] == [None]

    grid = ChemicalGrid.from_tiles(tiles)
    assert grid.classification_at(0, 1) == CellType.WALL
    assert grid.open_neighbors[(0, 0)] == []
    assert grid.open_neighbors[(0, 2)] == []


def test_parse_tile_map_trims_block_string_edges() -> None:
    tiles = parse_tile_map("\n\n.o\n  \n.o\n\n")
    assert len(tiles) == 3
    assert tiles[1] == [None, None]


def test_empty_sections_read_as_defaults() -> None:
    config = config_from_dict({'diffusion': {'rate': 0.2}, 'map': ["..."],
                               'robots': None, 'simulation': None, 'export': None})
    assert config.robots == RobotConfig()
    assert config.robot_count == 1
    assert config.max_steps == 500
    assert config.csv_enabled is True


def test_non_mapping_sections_are_rejected() -> None:
    with pytest.raises(ValueError):
        config_from_dict({'diffusion': {'rate': 0.2}, 'map': ["..."], 'robots': [1]})
    with pytest.raises(ValueError):
        config_from_dict({'diffusion': None, 'map': ["..."]})
    with pytest.raises(ValueError):
        config_from_dict({'diffusion': {'rate': 0.2}})
