"""Pytest configuration and fixtures."""

import asyncio
import json
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from httpx import ASGITransport, AsyncClient

from maze_explorer.config import Settings
from maze_explorer.core.maze_engine import Maze
from maze_explorer.core.maze_graph import Direction
from maze_explorer.main import app
from maze_explorer.services.maze_registry import MazeRegistry, get_maze_registry


# Sample grid maze for testing
SIMPLE_MAZE = """XXXXX
XS..X
X.X.X
X..EX
XXXXX"""

WALLED_OFF_MAZE = """XXXXX
XS.XE
X..XX
XXXXX"""


def build_linear_maze() -> Maze:
    """A --right--> B --right--> C (exit)."""
    maze = Maze("Linear")
    maze.add_location("A", name="Room A", title="Entrance")
    maze.add_location("B", name="Room B", title="Corridor")
    maze.add_location("C", is_exit=True, name="Room C", title="Exit")
    maze.connect("A", Direction.RIGHT, "B")
    maze.connect("B", Direction.RIGHT, "C")
    return maze


def build_dead_end_maze() -> Maze:
    """A --right--> B; B --up--> C (dead end); B --right--> D (exit)."""
    maze = Maze("Dead End")
    maze.add_location("A")
    maze.add_location("B")
    maze.add_location("C", title="Dead end")
    maze.add_location("D", is_exit=True, title="Exit")
    maze.connect("A", Direction.RIGHT, "B")
    maze.connect("B", Direction.UP, "C")
    maze.connect("B", Direction.RIGHT, "D")
    return maze


def build_loop_maze(with_exit: bool = True) -> Maze:
    """Four rooms in a loop: A right B, B down C, C left D, D up A. E (exit) left of D."""
    maze = Maze("Loop")
    for key in ("A", "B", "C", "D"):
        maze.add_location(key)
    maze.connect("A", Direction.RIGHT, "B")
    maze.connect("B", Direction.DOWN, "C")
    maze.connect("C", Direction.LEFT, "D")
    maze.connect("D", Direction.UP, "A")
    if with_exit:
        maze.add_location("E", is_exit=True)
        maze.connect("D", Direction.LEFT, "E")
    return maze


def build_slippery_maze() -> Maze:
    """Going back up from C lands on A instead of B. D (exit) is below A."""
    maze = Maze("Slippery")
    maze.add_location("A")
    maze.add_location("B")
    maze.add_location("C")
    maze.add_location("D", is_exit=True)
    maze.connect("A", Direction.RIGHT, "B")
    maze.connect("B", Direction.DOWN, "C", two_way=False)
    maze.connect("C", Direction.UP, "A", two_way=False)
    maze.connect("A", Direction.DOWN, "D")
    return maze


def build_trapdoor_maze() -> Maze:
    """Going back up from C drops into Z, which was never discovered."""
    maze = Maze("Trapdoor")
    maze.add_location("A")
    maze.add_location("B")
    maze.add_location("C")
    maze.add_location("Z")
    maze.connect("A", Direction.RIGHT, "B")
    maze.connect("B", Direction.DOWN, "C", two_way=False)
    maze.connect("C", Direction.UP, "Z", two_way=False)
    maze.connect("Z", Direction.LEFT, "A", two_way=False)
    return maze


class FakeConnection:
    """Stand-in for a websockets client connection backed by a local maze."""

    def __init__(self, maze: Maze, auto_reply: bool = True):
        self.walker = maze.create_walker()
        self.auto_reply = auto_reply
        self.sent: list[dict] = []
        self.closed = False
        self._held: list[str] = []
        self._inbox: asyncio.Queue = asyncio.Queue()
        self._inbox.put_nowait(json.dumps(self.walker.describe()))

    async def send(self, data: str) -> None:
        if self.closed:
            raise OSError("socket is closed")
        message = json.loads(data)
        self.sent.append(message)
        reply = json.dumps(self.walker.handle(message))
        if self.auto_reply:
            self._inbox.put_nowait(reply)
        else:
            self._held.append(reply)

    def push(self, raw: str) -> None:
        """Deliver a frame from the server side."""
        self._inbox.put_nowait(raw)

    def release(self) -> None:
        """Deliver every held reply."""
        for reply in self._held:
            self._inbox.put_nowait(reply)
        self._held.clear()

    def drop(self) -> None:
        """Close the connection from the server side."""
        self._inbox.put_nowait(None)

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        item = await self._inbox.get()
        if item is None:
            raise StopAsyncIteration
        return item

    async def close(self) -> None:
        self.closed = True
        self._inbox.put_nowait(None)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def registry() -> MazeRegistry:
    """Registry with a small hand-built maze."""
    return MazeRegistry({"linear": build_linear_maze()})


@pytest_asyncio.fixture(scope="function")
async def client(registry) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""
    app.dependency_overrides[get_maze_registry] = lambda: registry

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def ws_client(registry) -> Generator[TestClient, None, None]:
    """Create a test client for WebSocket sessions."""
    app.dependency_overrides[get_maze_registry] = lambda: registry

    with TestClient(app) as tc:
        yield tc

    app.dependency_overrides.clear()
