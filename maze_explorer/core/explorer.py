"""
Maze Explorer

Depth-first exploration of a maze session that only answers one move at a
time. The explorer keeps an explicit stack of frames for the spanning tree
it has walked so far, maps every edge a move reveals, backtracks out of
exhausted branches and, when the session turns up somewhere other than the
top of the stack, walks back there over the discovered map.

Example usage:
    async with WebSocketSessionChannel(settings.session_url("abc123")) as channel:
        result = await explore(channel)

    print(result.success, result.moves, result.locations_discovered)
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Optional

from maze_explorer.config import Settings, get_settings
from maze_explorer.schemas.run import RunResult

from .errors import DesynchronizationError, ExplorerError
from .maze_graph import Direction, MazeGraph
from .pathfinder import NoPathError, route

if TYPE_CHECKING:
    from maze_explorer.schemas.location import LocationMessage
    from maze_explorer.services.session_channel import SessionChannel

logger = logging.getLogger(__name__)


class ExplorerPhase(str, Enum):
    """Where the explorer is in a run."""
    EXPLORING = "exploring"
    RECOVERING = "recovering"
    SOLVED = "solved"
    EXHAUSTED = "exhausted"


@dataclass
class Frame:
    """A location's place in the depth-first spanning tree."""
    key: str
    parent_key: Optional[str] = None
    entry_direction: Optional[Direction] = None


@dataclass
class ExplorationState:
    """Everything one run knows. Owned by a single Explorer."""
    graph: MazeGraph = field(default_factory=MazeGraph)
    stack: list[Frame] = field(default_factory=list)
    start_key: Optional[str] = None
    position: Optional[str] = None  # last key the session reported
    exit_key: Optional[str] = None
    moves: int = 0
    history: list[Direction] = field(default_factory=list)
    phase: ExplorerPhase = ExplorerPhase.EXPLORING

    @property
    def finished(self) -> bool:
        return self.phase in (ExplorerPhase.SOLVED, ExplorerPhase.EXHAUSTED)

    @property
    def stack_keys(self) -> list[str]:
        return [frame.key for frame in self.stack]


class Explorer:
    """
    Depth-first explorer for a single maze session.

    One Explorer runs one session. Each call to step() makes exactly one
    decision: reconcile, finish, descend, merge or backtrack.
    """

    def __init__(self, channel: "SessionChannel", settings: Optional[Settings] = None):
        """
        Initialize the explorer.

        Args:
            channel: Session channel to drive. Only this explorer may use it.
            settings: Explorer settings. Defaults to the cached application settings.
        """
        self.channel = channel
        self.settings = settings or get_settings()
        self.state = ExplorationState()

    async def start(self) -> None:
        """Open the channel and root the search at the starting location."""
        if self.state.start_key is not None:
            raise RuntimeError("Explorer already started")

        message = await self.channel.open()
        state = self.state
        state.start_key = message.id
        state.position = message.id
        state.graph.add_location(message.id, message.available_directions, message.payload)
        state.stack.append(Frame(key=message.id))

        logger.info(
            f"Exploring from {message.id} "
            f"({len(message.available_directions)} directions available)"
        )

    async def step(self) -> ExplorerPhase:
        """
        Make one exploration decision.

        Returns:
            The phase after the decision.
        """
        state = self.state
        if state.finished:
            return state.phase
        if not state.stack:
            state.phase = ExplorerPhase.EXHAUSTED
            return state.phase

        frame = state.stack[-1]
        if state.position != frame.key:
            await self._recover(frame.key)

        location = state.graph[frame.key]
        if location.is_exit:
            state.exit_key = frame.key
            state.phase = ExplorerPhase.SOLVED
            logger.info(f"Exit found at {frame.key} after {state.moves} moves")
            return state.phase

        direction = location.next_unexplored()
        if direction is not None:
            await self._explore(frame, direction)
        else:
            await self._backtrack()
        return state.phase

    async def run(self) -> RunResult:
        """
        Explore until the exit is found or the reachable maze is exhausted.

        The channel is closed when the run ends, however it ends.

        Returns:
            RunResult describing the outcome.

        Raises:
            ExplorerError: On transport, protocol or desynchronization failures,
                with the last known location and move count attached.
        """
        try:
            await self.start()
            while not self.state.finished:
                await self.step()
        except ExplorerError as e:
            e.add_context(self.state.position, self.state.moves)
            logger.error(f"Exploration aborted: {e}")
            raise
        finally:
            await self.channel.close()

        return self.result()

    def result(self) -> RunResult:
        """Summarise the run so far."""
        state = self.state
        if state.start_key is None:
            raise RuntimeError("Explorer has not started")

        end = state.graph[state.exit_key].payload if state.exit_key else None
        return RunResult(
            success=state.phase == ExplorerPhase.SOLVED,
            start=state.graph[state.start_key].payload,
            end=end,
            moves=state.moves,
            locations_discovered=len(state.graph),
        )

    async def _move(self, direction: Direction) -> "LocationMessage":
        message = await self.channel.move(direction)
        self.state.moves += 1
        self.state.history.append(direction)
        self.state.position = message.id
        return message

    async def _explore(self, frame: Frame, direction: Direction) -> None:
        """Try an unexplored direction from the top frame."""
        state = self.state
        message = await self._move(direction)
        arrived = message.id

        if arrived not in state.graph:
            state.graph.add_location(arrived, message.available_directions, message.payload)
            state.graph.record_edge(frame.key, direction, arrived)
            state.stack.append(Frame(key=arrived, parent_key=frame.key, entry_direction=direction))
            return

        # Known location: map the edge but keep the stack a spanning tree
        state.graph.record_edge(frame.key, direction, arrived)
        if arrived == frame.key:
            logger.debug(f"Move {direction.value} from {frame.key} stayed in place")
            return

        logger.debug(f"Merged {frame.key} --{direction.value}--> {arrived}, stepping back")
        await self._move(direction.reverse)

    async def _backtrack(self) -> None:
        """Pop an exhausted frame and return to its parent."""
        state = self.state
        popped = state.stack.pop()

        if not state.stack:
            state.phase = ExplorerPhase.EXHAUSTED
            logger.warning(
                f"Explored all {len(state.graph)} reachable locations without finding an exit"
            )
            return

        logger.debug(f"Backtracking from {popped.key} to {popped.parent_key}")
        await self._move(popped.entry_direction.reverse)

    async def _recover(self, target: str) -> None:
        """Walk from the session's reported location back to the top frame."""
        state = self.state
        state.phase = ExplorerPhase.RECOVERING
        logger.warning(
            f"State mismatch: session at {state.position}, stack top {target}. "
            f"Attempting recovery."
        )

        for attempt in range(1, self.settings.max_recovery_attempts + 1):
            try:
                directions = route(state.graph, state.position, target)
            except NoPathError as e:
                raise DesynchronizationError(
                    f"Cannot find a known path from {state.position} to {target}"
                ) from e

            for direction in directions:
                await self._move(direction)

            if state.position == target:
                state.phase = ExplorerPhase.EXPLORING
                logger.info(f"Recovered to {target} in {len(directions)} moves")
                return

            logger.warning(
                f"Recovery attempt {attempt} ended at {state.position}, expected {target}"
            )

        raise DesynchronizationError(
            f"Could not return to {target} after "
            f"{self.settings.max_recovery_attempts} recovery attempts"
        )


async def explore(channel: "SessionChannel", settings: Optional[Settings] = None) -> RunResult:
    """Run a full exploration over a channel."""
    return await Explorer(channel, settings).run()
