"""API dependencies for dependency injection."""

from typing import Annotated

from fastapi import Depends

from maze_explorer.services.maze_registry import MazeRegistry, get_maze_registry

# Type aliases for cleaner route signatures
Registry = Annotated[MazeRegistry, Depends(get_maze_registry)]
