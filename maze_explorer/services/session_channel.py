"""
Session channels for talking to a maze session.

A channel delivers the starting location pushed at connection time and then
trades exactly one location message for each move command. A second move
cannot be issued until the first one's response has arrived.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import websockets
from pydantic import ValidationError
from websockets.exceptions import ConnectionClosed, WebSocketException

from maze_explorer.config import Settings, get_settings
from maze_explorer.core.errors import ProtocolError, TransportError
from maze_explorer.core.maze_engine import Maze, MazeWalker
from maze_explorer.core.maze_graph import Direction
from maze_explorer.schemas.location import LocationMessage, MoveCommand

logger = logging.getLogger(__name__)


def parse_message(raw: Any) -> LocationMessage:
    """
    Parse a location message from the session.

    Args:
        raw: JSON text, bytes, or an already-decoded dict.

    Raises:
        ProtocolError: If the message is not valid JSON, is an error frame,
            or does not describe a location.
    """
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ProtocolError(f"Invalid JSON from maze session: {e}") from e
    else:
        data = raw

    if isinstance(data, dict) and "error" in data and "id" not in data:
        raise ProtocolError(f"Maze session reported an error: {data['error']}")

    try:
        return LocationMessage.model_validate(data)
    except ValidationError as e:
        raise ProtocolError(f"Malformed location message: {e}") from e


class SessionChannel(ABC):
    """
    One-at-a-time request/response channel to a maze session.

    Subclasses implement _connect, _exchange and close. The base class
    enforces that only one move is ever awaiting its response.
    """

    def __init__(self):
        self._in_flight: Optional[Direction] = None

    async def __aenter__(self) -> "SessionChannel":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def open(self) -> LocationMessage:
        """
        Connect and wait for the starting location.

        Returns:
            The location message pushed by the session on connect.
        """
        return await self._connect()

    async def move(self, direction: Direction) -> LocationMessage:
        """
        Send one move command and wait for the resulting location.

        Raises:
            ProtocolError: If another move is still awaiting its response,
                or the response is malformed.
            TransportError: If the command cannot be sent or the connection drops.
        """
        if self._in_flight is not None:
            raise ProtocolError(
                f"Cannot move {direction.value} while move {self._in_flight.value} "
                f"is awaiting its response"
            )

        self._in_flight = direction
        try:
            return await self._exchange(direction)
        finally:
            self._in_flight = None

    @abstractmethod
    async def _connect(self) -> LocationMessage:
        """Establish the session and return the starting location."""

    @abstractmethod
    async def _exchange(self, direction: Direction) -> LocationMessage:
        """Send one move and return its response."""

    @abstractmethod
    async def close(self) -> None:
        """Release the session. Safe to call more than once."""


class WebSocketSessionChannel(SessionChannel):
    """
    Channel to a remote maze session over a WebSocket.

    A background task reads every inbound frame and resolves the single
    pending future. Frames that arrive when nothing is pending are dropped.

    Example:
        channel = WebSocketSessionChannel.for_maze("abc123")
        start = await channel.open()
        location = await channel.move(Direction.RIGHT)
        await channel.close()
    """

    def __init__(
        self,
        url: str,
        open_timeout: Optional[float] = None,
        move_timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
    ):
        """
        Initialize the channel.

        Args:
            url: WebSocket URL of the maze session.
            open_timeout: Seconds to wait for the connection and the starting
                location. Defaults to the configured value.
            move_timeout: Seconds to wait for a move response. Defaults to the
                configured value, where None waits indefinitely.
            settings: Settings to read defaults from.
        """
        super().__init__()
        settings = settings or get_settings()
        self.url = url
        self.open_timeout = open_timeout or settings.open_timeout_seconds
        self.move_timeout = move_timeout if move_timeout is not None else settings.move_timeout_seconds

        self._connection = None
        self._reader: Optional[asyncio.Task] = None
        self._pending: Optional[asyncio.Future] = None

    @classmethod
    def for_maze(cls, maze_id: str, settings: Optional[Settings] = None) -> "WebSocketSessionChannel":
        """Create a channel for a maze id on the configured service."""
        settings = settings or get_settings()
        return cls(settings.session_url(maze_id), settings=settings)

    async def _connect(self) -> LocationMessage:
        if self._connection is not None:
            raise ProtocolError("Channel is already open")

        # The start location may arrive as soon as the handshake completes
        self._pending = asyncio.get_running_loop().create_future()
        try:
            self._connection = await websockets.connect(self.url, open_timeout=self.open_timeout)
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            self._pending = None
            raise TransportError(f"Failed to connect to {self.url}: {e}") from e

        logger.info(f"Connected to {self.url}")
        self._reader = asyncio.create_task(self._read_messages())
        return await self._await_response(self.open_timeout)

    async def _exchange(self, direction: Direction) -> LocationMessage:
        if self._connection is None:
            raise TransportError("Channel is not open")
        if self._reader is None or self._reader.done():
            raise TransportError("Connection to maze session is closed")

        self._pending = asyncio.get_running_loop().create_future()
        try:
            await self._connection.send(MoveCommand.go(direction).model_dump_json())
        except (OSError, WebSocketException) as e:
            self._pending = None
            raise TransportError(f"Failed to send move {direction.value}: {e}") from e

        return await self._await_response(self.move_timeout)

    async def _await_response(self, timeout: Optional[float]) -> LocationMessage:
        future = self._pending
        try:
            if timeout is None:
                raw = await future
            else:
                raw = await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError as e:
            raise TransportError(f"No response from maze session within {timeout}s") from e
        finally:
            self._pending = None

        return parse_message(raw)

    async def _read_messages(self) -> None:
        """Route inbound frames to the pending request until the socket closes."""
        try:
            async for raw in self._connection:
                future = self._pending
                if future is None or future.done():
                    logger.warning(f"Dropping unsolicited message: {str(raw)[:200]}")
                    continue
                future.set_result(raw)
            error = TransportError("Connection closed by maze session")
        except ConnectionClosed as e:
            error = TransportError(f"Connection to maze session lost: {e}")

        future = self._pending
        if future is not None and not future.done():
            future.set_exception(error)

    async def close(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None

        if self._connection is not None:
            await self._connection.close()
            self._connection = None
            logger.info(f"Disconnected from {self.url}")


class LocalSessionChannel(SessionChannel):
    """
    In-process channel over a local maze.

    Commands and responses go through the same schemas as the WebSocket
    channel, so an explorer cannot tell the two apart.

    Example:
        channel = LocalSessionChannel(parse_maze_text(TUTORIAL_MAZE))
        result = await explore(channel)
    """

    def __init__(self, maze: Maze):
        super().__init__()
        self.maze = maze
        self.walker: Optional[MazeWalker] = None
        self.closed = False

    async def _connect(self) -> LocationMessage:
        if self.walker is not None:
            raise ProtocolError("Channel is already open")
        self.walker = self.maze.create_walker()
        return parse_message(self.walker.describe())

    async def _exchange(self, direction: Direction) -> LocationMessage:
        if self.walker is None or self.closed:
            raise TransportError("Channel is not open")
        return parse_message(self.walker.handle(MoveCommand.go(direction).model_dump()))

    async def close(self) -> None:
        self.closed = True
