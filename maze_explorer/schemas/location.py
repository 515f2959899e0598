"""Location and command schemas for the maze session wire protocol."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from maze_explorer.core.maze_graph import Direction


class LocationMessage(BaseModel):
    """Schema for a location description pushed by the maze session.

    Any fields beyond the id and available directions are kept as-is and
    exposed through ``payload``.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., min_length=1)
    available_directions: list[Direction] = Field(..., alias="availableDirections")

    @property
    def is_exit(self) -> bool:
        """An empty direction list marks the maze exit."""
        return not self.available_directions

    @property
    def payload(self) -> dict[str, Any]:
        """Full message as received, with wire field names."""
        return self.model_dump(mode="json", by_alias=True)


class MoveCommand(BaseModel):
    """Schema for a move request."""

    command: str = Field(..., pattern="^go (up|down|left|right)$")

    @classmethod
    def go(cls, direction: Direction) -> "MoveCommand":
        """Build the command for moving in a direction."""
        return cls(command=direction.command)

    @property
    def direction(self) -> Direction:
        """Direction named by the command."""
        return Direction(self.command.split(" ", 1)[1])


class ErrorMessage(BaseModel):
    """Schema for an error frame sent in place of a location."""

    error: str

    @field_validator("error")
    @classmethod
    def non_empty(cls, v: str) -> str:
        """Error frames must say what went wrong."""
        if not v.strip():
            raise ValueError("error must not be empty")
        return v
