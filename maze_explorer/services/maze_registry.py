"""Registry of local mazes served by the maze host."""

import logging
from typing import Iterator, Optional

from maze_explorer.config import Settings, get_settings
from maze_explorer.core.maze_engine import Maze
from maze_explorer.core.maze_parser import load_all_mazes, parse_maze_text

logger = logging.getLogger(__name__)


# Built-in mazes, always served
TUTORIAL_MAZE = """
XXXXXXXXXX
XS.......X
X.XXXXXX.X
X.X....X.X
X.X.XX.X.X
X.X.XX.X.X
X.X....X.X
X.XXXXXX.X
X........E
XXXXXXXXXX
""".strip()

LOOPS_MAZE = """
XXXXXXXXXXX
XS....X...X
X.XX.XX.X.X
X....X..X.X
XX.X...XX.X
X..X.X....X
X.XX.X.XX.X
X....X..X.E
XXXXXXXXXXX
""".strip()

BUILTIN_MAZES = {
    "tutorial": ("Tutorial", TUTORIAL_MAZE),
    "loops": ("Loops", LOOPS_MAZE),
}


class MazeRegistry:
    """Mazes the host can serve, keyed by maze id."""

    def __init__(self, mazes: Optional[dict[str, Maze]] = None):
        self._mazes: dict[str, Maze] = dict(mazes or {})

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "MazeRegistry":
        """Build a registry with the built-in mazes plus any in the configured directory."""
        settings = settings or get_settings()
        registry = cls(
            {maze_id: parse_maze_text(text, name=name) for maze_id, (name, text) in BUILTIN_MAZES.items()}
        )

        if settings.mazes_dir is not None:
            for maze_id, maze in load_all_mazes(settings.mazes_dir).items():
                registry.register(maze_id, maze)
            logger.info(f"Loaded mazes from {settings.mazes_dir}")

        return registry

    def __len__(self) -> int:
        return len(self._mazes)

    def __iter__(self) -> Iterator[tuple[str, Maze]]:
        return iter(sorted(self._mazes.items()))

    def get(self, maze_id: str) -> Optional[Maze]:
        """Get a maze by id."""
        return self._mazes.get(maze_id)

    def register(self, maze_id: str, maze: Maze) -> None:
        """Add or replace a maze."""
        if maze_id in self._mazes:
            logger.warning(f"Replacing maze {maze_id}")
        self._mazes[maze_id] = maze


# Singleton instance
_maze_registry: Optional[MazeRegistry] = None


def get_maze_registry() -> MazeRegistry:
    """Get singleton maze registry."""
    global _maze_registry
    if _maze_registry is None:
        _maze_registry = MazeRegistry.from_settings()
    return _maze_registry
