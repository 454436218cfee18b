"""Chemotaxis cellular automaton: chemical diffusion on a tile map and gradient-following robots."""

__version__ = "0.1.0"
