"""Depth-first explorer for maze sessions driven one move at a time."""

__version__ = "1.0.0"
