"""
Maze Graph

Incremental map of a maze discovered through a move protocol:
- Direction alphabet and its fixed reversal
- Locations with their reported directions and payload
- Directed edges recorded as moves reveal them

The graph only grows. Locations and edges are never removed during a run.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Movement directions accepted by a maze session."""
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"

    @property
    def reverse(self) -> "Direction":
        """Get the direction that undoes a move in this direction."""
        reverses = {
            Direction.UP: Direction.DOWN,
            Direction.DOWN: Direction.UP,
            Direction.LEFT: Direction.RIGHT,
            Direction.RIGHT: Direction.LEFT,
        }
        return reverses[self]

    @property
    def command(self) -> str:
        """Get the wire command for moving in this direction."""
        return f"go {self.value}"


@dataclass
class Location:
    """A discovered location in the maze."""
    key: str
    available_directions: tuple[Direction, ...]
    payload: dict[str, Any] = field(default_factory=dict)
    neighbours: dict[Direction, str] = field(default_factory=dict)

    @property
    def is_exit(self) -> bool:
        """A location with no available directions is the maze exit."""
        return not self.available_directions

    def next_unexplored(self) -> Optional[Direction]:
        """First available direction, in reported order, with no recorded neighbour."""
        for direction in self.available_directions:
            if direction not in self.neighbours:
                return direction
        return None


class MazeGraph:
    """
    Map of discovered locations and the edges between them.

    Example usage:
        graph = MazeGraph()
        graph.add_location("a", [Direction.RIGHT], {"id": "a"})
        graph.add_location("b", [Direction.LEFT], {"id": "b"})
        graph.record_edge("a", Direction.RIGHT, "b")

        graph.neighbours_of("b")  # {Direction.LEFT: "a"}
    """

    def __init__(self):
        self._locations: dict[str, Location] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._locations

    def __len__(self) -> int:
        return len(self._locations)

    def __iter__(self) -> Iterator[Location]:
        return iter(self._locations.values())

    def get(self, key: str) -> Optional[Location]:
        """Get a location by key."""
        return self._locations.get(key)

    def __getitem__(self, key: str) -> Location:
        return self._locations[key]

    def add_location(
        self,
        key: str,
        available_directions,
        payload: Optional[dict[str, Any]] = None,
    ) -> Location:
        """
        Register a location the first time it is seen.

        Registering a key that is already known is a no-op and returns the
        existing location unchanged.

        Args:
            key: Opaque location key issued by the session.
            available_directions: Directions reported on the first visit, in order.
            payload: Descriptive attributes stored verbatim.

        Returns:
            The registered Location.
        """
        existing = self._locations.get(key)
        if existing is not None:
            return existing

        location = Location(
            key=key,
            available_directions=tuple(available_directions),
            payload=dict(payload or {}),
        )
        self._locations[key] = location
        return location

    def record_edge(self, from_key: str, direction: Direction, to_key: str) -> None:
        """
        Record that moving from from_key in direction leads to to_key.

        The forward neighbour is set (or overwritten). The reverse edge on
        to_key is back-filled only when that direction has no neighbour yet.

        Raises:
            KeyError: If from_key has not been registered.
        """
        origin = self._locations[from_key]
        origin.neighbours[direction] = to_key

        if to_key == from_key:
            return

        target = self._locations.get(to_key)
        if target is None:
            return

        back = direction.reverse
        if back not in target.neighbours:
            target.neighbours[back] = from_key
            if back not in target.available_directions:
                logger.debug(
                    f"Back-filled {to_key} --{back.value}--> {from_key} "
                    f"outside its reported directions"
                )

    def neighbours_of(self, key: str) -> dict[Direction, str]:
        """Get the discovered direction -> key mapping in discovery order."""
        return self._locations[key].neighbours

    def edges(self) -> Iterator[tuple[str, Direction, str]]:
        """Iterate over every recorded edge as (from_key, direction, to_key)."""
        for location in self._locations.values():
            for direction, neighbour in location.neighbours.items():
                yield location.key, direction, neighbour
