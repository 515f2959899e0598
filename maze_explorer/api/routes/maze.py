"""Maze routes for listing local mazes and playing them over a WebSocket."""

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from maze_explorer.api.deps import Registry
from maze_explorer.schemas.location import ErrorMessage
from maze_explorer.schemas.maze import MazeListItem, MazeListResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Mazes"])


@router.get(
    "/v1/maze",
    response_model=MazeListResponse,
)
async def list_mazes(registry: Registry) -> MazeListResponse:
    """List all mazes served by this host."""
    maze_items = [
        MazeListItem(id=maze_id, name=maze.name, locations=len(maze))
        for maze_id, maze in registry
    ]

    return MazeListResponse(
        mazes=maze_items,
        total=len(maze_items),
    )


@router.websocket("/ws/{maze_id}")
async def maze_session(websocket: WebSocket, maze_id: str, registry: Registry):
    """WebSocket endpoint for playing a maze.

    On connect the starting location is pushed:
    {
        "id": "r1c1",
        "availableDirections": ["down", "right"],
        "name": "Cell (1, 1)",
        "title": "Start"
    }

    Each {"command": "go <direction>"} is answered with the location the
    move ends at. Directions that are not available leave the walker in
    place. Anything else is answered with {"error": "..."}.
    """
    await websocket.accept()

    maze = registry.get(maze_id)
    if maze is None:
        await websocket.send_json(ErrorMessage(error=f"Maze not found: {maze_id}").model_dump())
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    walker = maze.create_walker()
    logger.info(f"Session started on maze {maze_id} at {walker.position}")
    await websocket.send_json(walker.describe())

    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except json.JSONDecodeError:
                await websocket.send_json(ErrorMessage(error="Messages must be JSON").model_dump())
                continue
            await websocket.send_json(walker.handle(message))
    except WebSocketDisconnect:
        logger.info(f"Session on maze {maze_id} ended after {walker.moves} moves at {walker.position}")
