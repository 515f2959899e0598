# Services
from .maze_registry import MazeRegistry, get_maze_registry
from .session_channel import (
    LocalSessionChannel,
    SessionChannel,
    WebSocketSessionChannel,
    parse_message,
)

__all__ = [
    "MazeRegistry",
    "get_maze_registry",
    "LocalSessionChannel",
    "SessionChannel",
    "WebSocketSessionChannel",
    "parse_message",
]
