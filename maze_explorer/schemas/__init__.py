# Wire and API schemas
from .location import ErrorMessage, LocationMessage, MoveCommand
from .maze import MazeListItem, MazeListResponse
from .run import RunResult

__all__ = [
    "ErrorMessage",
    "LocationMessage",
    "MoveCommand",
    "MazeListItem",
    "MazeListResponse",
    "RunResult",
]
