"""
Maze Parser for local mazes.

Loads text grids from strings or the filesystem and turns them into
location mazes served over the session protocol.

Maze Format:
    S = Start position
    E = Exit (goal)
    X = Wall (impassable)
    . = Open path (can also be space)

Every open cell becomes a location keyed "r<row>c<col>". Its available
directions are the open neighbouring cells, in up, down, left, right order.
The exit reports no directions.
"""

import logging
from pathlib import Path
from typing import Optional

from .maze_engine import Maze
from .maze_graph import Direction

logger = logging.getLogger(__name__)


class MazeParseError(Exception):
    """Exception raised when maze parsing fails."""

    pass


class MazeValidationError(Exception):
    """Exception raised when maze validation fails."""

    pass


VALID_CHARS = {"S", "E", "X", ".", " "}
OPEN_CHARS = {"S", "E", ".", " "}

DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}


def cell_key(x: int, y: int) -> str:
    """Location key for a grid cell."""
    return f"r{y}c{x}"


def parse_maze_text(maze_text: str, name: str = "Unnamed") -> Maze:
    """
    Parse maze text into a location maze.

    Args:
        maze_text: Multi-line string representing the maze grid.
        name: Name of the maze.

    Returns:
        Maze with one location per open cell.

    Raises:
        MazeParseError: If the maze cannot be parsed.
        MazeValidationError: If the maze is invalid.
    """
    if not maze_text or not maze_text.strip():
        raise MazeParseError("Maze text is empty")

    lines = maze_text.strip("\r\n").splitlines()

    start_pos: Optional[tuple[int, int]] = None
    exit_pos: Optional[tuple[int, int]] = None
    open_cells: list[tuple[int, int]] = []

    for y, line in enumerate(lines):
        for x, char in enumerate(line):
            if char not in VALID_CHARS:
                raise MazeValidationError(
                    f"Invalid character '{char}' at position ({x}, {y}). "
                    f"Valid characters: {', '.join(sorted(VALID_CHARS))}"
                )
            if char not in OPEN_CHARS:
                continue
            open_cells.append((x, y))

            if char == "S":
                if start_pos is not None:
                    raise MazeValidationError(
                        f"Multiple start positions found: "
                        f"first at {start_pos}, second at ({x}, {y})"
                    )
                start_pos = (x, y)
            elif char == "E":
                if exit_pos is not None:
                    raise MazeValidationError(
                        f"Multiple exit positions found: "
                        f"first at {exit_pos}, second at ({x}, {y})"
                    )
                exit_pos = (x, y)

    if start_pos is None:
        raise MazeValidationError("Maze must have a start position (S)")

    if exit_pos is None:
        raise MazeValidationError("Maze must have an exit position (E)")

    open_set = set(open_cells)
    maze = Maze(name)

    for x, y in open_cells:
        if (x, y) == start_pos:
            title = "Start"
        elif (x, y) == exit_pos:
            title = "Exit"
        else:
            title = "Passage"
        maze.add_location(
            cell_key(x, y),
            start=(x, y) == start_pos,
            is_exit=(x, y) == exit_pos,
            name=f"Cell ({x}, {y})",
            title=title,
            x=x,
            y=y,
        )

    # One-way here; the opposite cell adds its own passage back
    for x, y in open_cells:
        for direction, (dx, dy) in DELTAS.items():
            if (x + dx, y + dy) in open_set:
                maze.connect(cell_key(x, y), direction, cell_key(x + dx, y + dy), two_way=False)

    return maze


def load_maze_file(file_path: Path | str, name: Optional[str] = None) -> Maze:
    """
    Load and parse a maze file from the filesystem.

    Args:
        file_path: Path to the maze file.
        name: Optional name override. If not provided, uses filename.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        MazeParseError: If the maze cannot be parsed.
        MazeValidationError: If the maze is invalid.
    """
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"Maze file not found: {file_path}")

    if not file_path.is_file():
        raise MazeParseError(f"Path is not a file: {file_path}")

    try:
        maze_text = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MazeParseError(f"Failed to read maze file: {e}") from e

    if name is None:
        name = file_path.stem.replace("_", " ").replace("-", " ").title()

    return parse_maze_text(maze_text, name=name)


def load_all_mazes(mazes_dir: Path | str) -> dict[str, Maze]:
    """
    Load all maze files from a directory.

    Files that fail to parse are logged and skipped.

    Returns:
        Mapping of file stem to Maze.

    Raises:
        FileNotFoundError: If the directory doesn't exist.
    """
    mazes_dir = Path(mazes_dir)

    if not mazes_dir.exists():
        raise FileNotFoundError(f"Mazes directory not found: {mazes_dir}")

    if not mazes_dir.is_dir():
        raise MazeParseError(f"Path is not a directory: {mazes_dir}")

    mazes = {}
    for maze_file in sorted(mazes_dir.glob("*.txt")):
        try:
            mazes[maze_file.stem] = load_maze_file(maze_file)
        except (MazeParseError, MazeValidationError) as e:
            logger.warning(f"Failed to load {maze_file}: {e}")

    return mazes


def validate_maze_text(maze_text: str) -> tuple[bool, Optional[str]]:
    """
    Validate maze text without raising exceptions.

    Returns:
        Tuple of (is_valid, error_message).
        error_message is None if valid.
    """
    try:
        parse_maze_text(maze_text)
        return True, None
    except (MazeParseError, MazeValidationError) as e:
        return False, str(e)
