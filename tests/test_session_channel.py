"""Tests for session channels and wire message parsing."""

import asyncio
import json
import logging
from unittest.mock import AsyncMock, patch

import pytest

from maze_explorer.core.errors import ProtocolError, TransportError
from maze_explorer.core.explorer import explore
from maze_explorer.core.maze_graph import Direction
from maze_explorer.schemas.location import MoveCommand
from maze_explorer.services.session_channel import (
    LocalSessionChannel,
    WebSocketSessionChannel,
    parse_message,
)

from .conftest import FakeConnection, build_dead_end_maze, build_linear_maze

URL = "ws://maze.test/ws/linear"
CONNECT = "maze_explorer.services.session_channel.websockets.connect"


class TestParseMessage:
    """Tests for parsing location messages."""

    def test_parse_text(self):
        """Test parsing a JSON location message."""
        message = parse_message('{"id": "a1", "availableDirections": ["up", "left"]}')

        assert message.id == "a1"
        assert message.available_directions == [Direction.UP, Direction.LEFT]
        assert message.is_exit is False

    def test_extra_fields_kept_in_payload(self):
        """Test descriptive fields are carried through verbatim."""
        raw = {
            "id": "a1",
            "availableDirections": [],
            "name": "Hall",
            "title": "The Great Hall",
            "meta": {"depth": 3},
        }
        message = parse_message(raw)

        assert message.is_exit is True
        assert message.payload == raw

    def test_parse_bytes(self):
        """Test binary frames are accepted."""
        message = parse_message(b'{"id": "a1", "availableDirections": ["down"]}')
        assert message.available_directions == [Direction.DOWN]

    def test_invalid_json(self):
        """Test non-JSON text is a protocol error."""
        with pytest.raises(ProtocolError, match="Invalid JSON"):
            parse_message("not json")

    def test_error_frame(self):
        """Test an error frame is a protocol error carrying the session's reason."""
        with pytest.raises(ProtocolError, match="Unknown direction: north"):
            parse_message({"error": "Unknown direction: north"})

    @pytest.mark.parametrize(
        "raw",
        [
            {"id": "a1"},
            {"availableDirections": ["up"]},
            {"id": "", "availableDirections": ["up"]},
            {"id": "a1", "availableDirections": ["north"]},
            ["id", "a1"],
        ],
    )
    def test_malformed_location(self, raw):
        """Test messages that do not describe a location."""
        with pytest.raises(ProtocolError, match="Malformed location message"):
            parse_message(raw)


class TestMoveCommand:
    """Tests for the move command schema."""

    def test_go(self):
        """Test building the wire command for a direction."""
        command = MoveCommand.go(Direction.RIGHT)

        assert command.model_dump() == {"command": "go right"}
        assert json.loads(command.model_dump_json()) == {"command": "go right"}
        assert command.direction == Direction.RIGHT

    def test_rejects_unknown_command(self):
        """Test only go commands are valid."""
        with pytest.raises(ValueError):
            MoveCommand(command="jump up")


class TestLocalSessionChannel:
    """Tests for the in-process channel."""

    @pytest.mark.asyncio
    async def test_open_and_move(self):
        """Test the start location and one move."""
        channel = LocalSessionChannel(build_linear_maze())

        start = await channel.open()
        moved = await channel.move(Direction.RIGHT)

        assert start.id == "A"
        assert moved.id == "B"
        assert moved.available_directions == [Direction.LEFT, Direction.RIGHT]
        assert channel.walker.moves == 1

    @pytest.mark.asyncio
    async def test_unavailable_direction_stays_in_place(self):
        """Test moving into a wall reports the same location."""
        channel = LocalSessionChannel(build_linear_maze())
        await channel.open()

        moved = await channel.move(Direction.UP)

        assert moved.id == "A"

    @pytest.mark.asyncio
    async def test_move_before_open(self):
        """Test moving on an unopened channel fails."""
        channel = LocalSessionChannel(build_linear_maze())

        with pytest.raises(TransportError, match="not open"):
            await channel.move(Direction.RIGHT)

    @pytest.mark.asyncio
    async def test_open_twice(self):
        """Test a channel carries a single session."""
        channel = LocalSessionChannel(build_linear_maze())
        await channel.open()

        with pytest.raises(ProtocolError, match="already open"):
            await channel.open()

    @pytest.mark.asyncio
    async def test_context_manager_closes(self):
        """Test leaving the context closes the channel."""
        async with LocalSessionChannel(build_linear_maze()) as channel:
            await channel.open()

        assert channel.closed is True
        with pytest.raises(TransportError):
            await channel.move(Direction.RIGHT)


class TestWebSocketSessionChannel:
    """Tests for the WebSocket channel against a fake connection."""

    @pytest.mark.asyncio
    async def test_open_receives_start(self, settings):
        """Test the pushed start location is returned by open."""
        conn = FakeConnection(build_linear_maze())
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)) as connect:
            start = await channel.open()

        connect.assert_awaited_once_with(URL, open_timeout=settings.open_timeout_seconds)
        assert start.id == "A"
        await channel.close()
        assert conn.closed is True

    @pytest.mark.asyncio
    async def test_move_sends_command(self, settings):
        """Test a move sends one command and returns its response."""
        conn = FakeConnection(build_linear_maze())
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            await channel.open()
            moved = await channel.move(Direction.RIGHT)

        assert moved.id == "B"
        assert conn.sent == [{"command": "go right"}]
        await channel.close()

    @pytest.mark.asyncio
    async def test_connect_failure(self, settings):
        """Test a refused connection is a transport error."""
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(side_effect=OSError("Connection refused"))):
            with pytest.raises(TransportError, match="Failed to connect"):
                await channel.open()

    @pytest.mark.asyncio
    async def test_move_before_open(self, settings):
        """Test moving on an unopened channel fails."""
        channel = WebSocketSessionChannel(URL, settings=settings)

        with pytest.raises(TransportError, match="not open"):
            await channel.move(Direction.RIGHT)

    @pytest.mark.asyncio
    async def test_second_move_while_waiting(self, settings):
        """Test only one move may await its response at a time."""
        conn = FakeConnection(build_linear_maze(), auto_reply=False)
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            await channel.open()

        first = asyncio.create_task(channel.move(Direction.RIGHT))
        await asyncio.sleep(0.01)

        with pytest.raises(ProtocolError, match="awaiting its response"):
            await channel.move(Direction.LEFT)

        conn.release()
        moved = await first
        assert moved.id == "B"
        assert conn.sent == [{"command": "go right"}]
        await channel.close()

    @pytest.mark.asyncio
    async def test_connection_dropped_mid_move(self, settings):
        """Test the pending move fails when the session hangs up."""
        conn = FakeConnection(build_linear_maze(), auto_reply=False)
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            await channel.open()

        pending = asyncio.create_task(channel.move(Direction.RIGHT))
        await asyncio.sleep(0.01)
        conn.drop()

        with pytest.raises(TransportError, match="closed"):
            await pending

        with pytest.raises(TransportError, match="closed"):
            await channel.move(Direction.RIGHT)
        await channel.close()

    @pytest.mark.asyncio
    async def test_move_timeout(self, settings):
        """Test a configured move timeout bounds the wait."""
        conn = FakeConnection(build_linear_maze(), auto_reply=False)
        channel = WebSocketSessionChannel(URL, move_timeout=0.05, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            await channel.open()

        with pytest.raises(TransportError, match="No response"):
            await channel.move(Direction.RIGHT)
        await channel.close()

    @pytest.mark.asyncio
    async def test_error_frame_in_place_of_location(self, settings):
        """Test an error frame answering a move is a protocol error."""
        conn = FakeConnection(build_linear_maze(), auto_reply=False)
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            await channel.open()

        pending = asyncio.create_task(channel.move(Direction.RIGHT))
        await asyncio.sleep(0.01)
        conn.push(json.dumps({"error": "Session expired"}))

        with pytest.raises(ProtocolError, match="Session expired"):
            await pending
        await channel.close()

    @pytest.mark.asyncio
    async def test_unsolicited_message_dropped(self, settings, caplog):
        """Test frames that arrive with no move pending are discarded."""
        conn = FakeConnection(build_linear_maze())
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            await channel.open()

        with caplog.at_level(logging.WARNING):
            conn.push(json.dumps({"id": "Q", "availableDirections": []}))
            await asyncio.sleep(0.01)

        moved = await channel.move(Direction.RIGHT)

        assert moved.id == "B"
        assert "Dropping unsolicited message" in caplog.text
        await channel.close()

    @pytest.mark.asyncio
    async def test_close_twice(self, settings):
        """Test closing is idempotent."""
        conn = FakeConnection(build_linear_maze())
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            await channel.open()

        await channel.close()
        await channel.close()
        assert conn.closed is True

    def test_for_maze_uses_configured_base_url(self, settings):
        """Test the session URL is built from the base URL and maze id."""
        channel = WebSocketSessionChannel.for_maze("abc123", settings)

        assert channel.url == "wss://maze.robanderson.dev/ws/abc123"
        assert channel.open_timeout == settings.open_timeout_seconds
        assert channel.move_timeout is None

    @pytest.mark.asyncio
    async def test_full_exploration(self, settings):
        """Test an explorer drives a WebSocket session to the exit."""
        conn = FakeConnection(build_dead_end_maze())
        channel = WebSocketSessionChannel(URL, settings=settings)

        with patch(CONNECT, new=AsyncMock(return_value=conn)):
            result = await explore(channel, settings)

        assert result.success is True
        assert result.moves == 4
        assert [m["command"] for m in conn.sent] == ["go right", "go up", "go down", "go right"]
        assert conn.closed is True
