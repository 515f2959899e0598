"""
Shortest paths over the discovered part of a maze.

Only edges that have actually been observed are followed. Ties between
equally short paths go to the neighbour that was recorded first.
"""

from collections import deque
from typing import Optional

from .maze_graph import Direction, MazeGraph


class NoPathError(Exception):
    """Raised when the target cannot be reached over discovered edges."""

    def __init__(self, from_key: str, to_key: str):
        super().__init__(f"No known path from {from_key} to {to_key}")
        self.from_key = from_key
        self.to_key = to_key


def shortest_path(graph: MazeGraph, from_key: str, to_key: str) -> list[str]:
    """
    Find the shortest path between two discovered locations using BFS.

    Args:
        graph: The discovered maze graph.
        from_key: Location to start from.
        to_key: Location to reach.

    Returns:
        List of location keys from from_key to to_key, both included.

    Raises:
        NoPathError: If to_key is unreachable using only discovered edges.
    """
    if from_key not in graph:
        raise NoPathError(from_key, to_key)
    if from_key == to_key:
        return [from_key]

    parents: dict[str, Optional[str]] = {from_key: None}
    queue = deque([from_key])

    while queue:
        key = queue.popleft()
        location = graph.get(key)
        if location is None:
            continue

        for neighbour in location.neighbours.values():
            if neighbour in parents:
                continue
            parents[neighbour] = key

            if neighbour == to_key:
                path = [neighbour]
                while parents[path[-1]] is not None:
                    path.append(parents[path[-1]])
                path.reverse()
                return path

            queue.append(neighbour)

    raise NoPathError(from_key, to_key)


def directions_for_path(graph: MazeGraph, path: list[str]) -> list[Direction]:
    """Convert a path of location keys into the directions that walk it."""
    directions = []
    for current, following in zip(path, path[1:]):
        for direction, neighbour in graph.neighbours_of(current).items():
            if neighbour == following:
                directions.append(direction)
                break
        else:
            raise NoPathError(current, following)
    return directions


def route(graph: MazeGraph, from_key: str, to_key: str) -> list[Direction]:
    """Get the directions of the shortest known route between two locations."""
    return directions_for_path(graph, shortest_path(graph, from_key, to_key))
