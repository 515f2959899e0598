# Core module
from .errors import DesynchronizationError, ExplorerError, ProtocolError, TransportError
from .maze_graph import Direction, Location, MazeGraph
from .pathfinder import NoPathError, directions_for_path, route, shortest_path
from .maze_engine import Maze, MazeLocation, MazeWalker
from .maze_parser import (
    MazeParseError,
    MazeValidationError,
    parse_maze_text,
    load_maze_file,
    load_all_mazes,
    validate_maze_text,
)
from .explorer import ExplorationState, Explorer, ExplorerPhase, Frame, explore

__all__ = [
    "DesynchronizationError",
    "ExplorerError",
    "ProtocolError",
    "TransportError",
    "Direction",
    "Location",
    "MazeGraph",
    "NoPathError",
    "directions_for_path",
    "route",
    "shortest_path",
    "Maze",
    "MazeLocation",
    "MazeWalker",
    "MazeParseError",
    "MazeValidationError",
    "parse_maze_text",
    "load_maze_file",
    "load_all_mazes",
    "validate_maze_text",
    "ExplorationState",
    "Explorer",
    "ExplorerPhase",
    "Frame",
    "explore",
]
