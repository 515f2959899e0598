#!/usr/bin/env python3
"""
Maze Explorer Runner

Explores a maze session from the command line and reports the outcome.

Usage:
    maze-explorer <maze_id>          Explore {MAZE_WS_BASE_URL}/<maze_id>
    maze-explorer --file <path>      Explore a local text grid in-process

The run summary is logged and the result is printed as one JSON line.
Exit status is 0 when the exit was found, 1 otherwise.
"""

import asyncio
import json
import logging
import sys
import time
from typing import Optional

from maze_explorer.config import Settings, get_settings
from maze_explorer.core.errors import ExplorerError
from maze_explorer.core.explorer import explore
from maze_explorer.core.maze_parser import MazeParseError, MazeValidationError, load_maze_file
from maze_explorer.schemas.run import RunResult
from maze_explorer.services.session_channel import (
    LocalSessionChannel,
    SessionChannel,
    WebSocketSessionChannel,
)

logger = logging.getLogger("maze_explorer")

USAGE = "Usage: maze-explorer <maze_id> | maze-explorer --file <path>"


def describe(payload: Optional[dict]) -> str:
    """One-line label for a location payload."""
    if not payload:
        return "-"
    name = payload.get("name")
    title = payload.get("title")
    if name and title:
        return f"{name} - {title}"
    return str(name or title or payload.get("id"))


def build_channel(args: list[str], settings: Settings) -> tuple[SessionChannel, str]:
    """
    Build the session channel named by the command-line arguments.

    Returns:
        Tuple of (channel, label for logging).

    Raises:
        ValueError: If the arguments are not understood.
        FileNotFoundError, MazeParseError, MazeValidationError: For bad maze files.
    """
    if not args:
        raise ValueError(USAGE)

    if args[0] == "--file":
        if len(args) != 2:
            raise ValueError(USAGE)
        maze = load_maze_file(args[1])
        return LocalSessionChannel(maze), maze.name

    if len(args) != 1 or args[0].startswith("-"):
        raise ValueError(USAGE)
    return WebSocketSessionChannel.for_maze(args[0], settings), args[0]


def report(result: RunResult, duration: float) -> None:
    """Log the run summary."""
    if result.success:
        logger.info("=== Maze Solved ===")
        logger.info(f"Start: {describe(result.start)}")
        logger.info(f"End: {describe(result.end)}")
    else:
        logger.warning(
            "Failed to find the end of the maze after exploring all reachable locations."
        )
    logger.info(f"Total moves: {result.moves}")
    logger.info(f"Total locations discovered: {result.locations_discovered}")
    logger.info(f"Maze exploration completed in {duration:.2f} seconds")


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point."""
    args = sys.argv[1:] if argv is None else argv
    settings = get_settings()

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        channel, label = build_channel(args, settings)
    except ValueError as e:
        print(json.dumps({"success": False, "error": str(e)}))
        sys.exit(1)
    except (FileNotFoundError, MazeParseError, MazeValidationError) as e:
        print(json.dumps({"success": False, "error": f"{type(e).__name__}: {e}"}))
        sys.exit(1)

    logger.info(f"Solving maze {label}")
    start_time = time.time()

    try:
        result = asyncio.run(explore(channel, settings))
    except ExplorerError as e:
        print(json.dumps({
            "success": False,
            "error": f"{type(e).__name__}: {e.message}",
            "location": e.location_key,
            "moves": e.moves,
        }))
        sys.exit(1)

    report(result, time.time() - start_time)
    print(result.model_dump_json())
    sys.exit(0 if result.success else 1)


if __name__ == "__main__":
    main()
