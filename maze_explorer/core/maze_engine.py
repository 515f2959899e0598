"""
Local Maze Engine

In-memory mazes that speak the same protocol as a remote maze session:
- Locations joined by directional passages (two-way or one-way)
- A walker per session that answers "go <direction>" commands
- Exit detection (the exit reports no available directions)

Mazes are read-only once built. Each session gets its own walker, so any
number of sessions can share one maze.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from .maze_graph import Direction

# Wire fields the engine fills in itself
RESERVED_FIELDS = {"id", "availableDirections"}


@dataclass
class MazeLocation:
    """A location in a local maze."""
    key: str
    attributes: dict[str, Any] = field(default_factory=dict)
    passages: dict[Direction, str] = field(default_factory=dict)
    is_exit: bool = False

    @property
    def available_directions(self) -> list[Direction]:
        """Directions reported to the session, in passage order."""
        if self.is_exit:
            return []
        return list(self.passages)


class Maze:
    """
    A maze made of locations and passages.

    Example usage:
        maze = Maze("Linear")
        maze.add_location("A", title="Entrance")
        maze.add_location("B")
        maze.add_location("C", is_exit=True)
        maze.connect("A", Direction.RIGHT, "B")
        maze.connect("B", Direction.RIGHT, "C")

        walker = maze.create_walker()
        walker.go(Direction.RIGHT)  # {"id": "B", "availableDirections": ["left", "right"]}
    """

    def __init__(self, name: str = "Unnamed"):
        self.name = name
        self.start_key: Optional[str] = None
        self._locations: dict[str, MazeLocation] = {}

    def __len__(self) -> int:
        return len(self._locations)

    def __contains__(self, key: object) -> bool:
        return key in self._locations

    def location(self, key: str) -> MazeLocation:
        """Get a location by key."""
        return self._locations[key]

    @property
    def exit_keys(self) -> list[str]:
        """Keys of every exit location."""
        return [loc.key for loc in self._locations.values() if loc.is_exit]

    def add_location(
        self,
        key: str,
        *,
        start: bool = False,
        is_exit: bool = False,
        **attributes: Any,
    ) -> MazeLocation:
        """
        Add a location to the maze.

        The first location added is the start unless another is marked
        with start=True.

        Raises:
            ValueError: If the key is empty or already used.
        """
        if not key:
            raise ValueError("Location key must not be empty")
        if key in self._locations:
            raise ValueError(f"Duplicate location key: {key}")
        reserved = RESERVED_FIELDS & attributes.keys()
        if reserved:
            raise ValueError(f"Reserved attribute names: {', '.join(sorted(reserved))}")

        location = MazeLocation(key=key, attributes=dict(attributes), is_exit=is_exit)
        self._locations[key] = location

        if start or self.start_key is None:
            self.start_key = key
        return location

    def connect(
        self,
        from_key: str,
        direction: Direction,
        to_key: str,
        two_way: bool = True,
    ) -> None:
        """
        Add a passage from one location to another.

        Two-way passages also get the reverse passage back. A one-way passage
        is how a maze makes a return trip land somewhere unexpected.

        Raises:
            ValueError: If either location is unknown or the passage exists.
        """
        for key in (from_key, to_key):
            if key not in self._locations:
                raise ValueError(f"Unknown location: {key}")

        origin = self._locations[from_key]
        if direction in origin.passages:
            raise ValueError(f"Passage {direction.value} from {from_key} already exists")
        origin.passages[direction] = to_key

        if two_way:
            target = self._locations[to_key]
            back = direction.reverse
            if back in target.passages:
                raise ValueError(f"Passage {back.value} from {to_key} already exists")
            target.passages[back] = from_key

    def describe(self, key: str) -> dict[str, Any]:
        """Build the wire message describing a location."""
        location = self._locations[key]
        return {
            "id": location.key,
            "availableDirections": [d.value for d in location.available_directions],
            **location.attributes,
        }

    def create_walker(self) -> "MazeWalker":
        """Start a new session at the maze's start location."""
        if self.start_key is None:
            raise ValueError("Maze has no locations")
        return MazeWalker(self)


class MazeWalker:
    """Position of one session inside a local maze."""

    def __init__(self, maze: Maze):
        self.maze = maze
        self.position: str = maze.start_key
        self.moves = 0

    def describe(self) -> dict[str, Any]:
        """Describe the current location."""
        return self.maze.describe(self.position)

    def go(self, direction: Direction) -> dict[str, Any]:
        """
        Move in a direction and describe where the walker ends up.

        A direction that is not available leaves the walker in place.
        """
        self.moves += 1
        location = self.maze.location(self.position)
        if direction in location.available_directions:
            self.position = location.passages[direction]
        return self.describe()

    def handle(self, message: Any) -> dict[str, Any]:
        """Answer one raw command message from a session."""
        command = message.get("command") if isinstance(message, dict) else None
        if not isinstance(command, str):
            return {"error": "Expected a message of the form {\"command\": \"go <direction>\"}"}

        verb, _, argument = command.strip().partition(" ")
        if verb != "go":
            return {"error": f"Unknown command: {command}"}
        try:
            direction = Direction(argument.strip())
        except ValueError:
            return {"error": f"Unknown direction: {argument.strip()}"}
        return self.go(direction)
