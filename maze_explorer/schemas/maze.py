"""Maze schemas for the local maze host."""

from pydantic import BaseModel, Field


class MazeListItem(BaseModel):
    """Schema for a served maze."""

    id: str
    name: str
    locations: int = Field(..., gt=0)


class MazeListResponse(BaseModel):
    """Schema for maze list response."""

    mazes: list[MazeListItem]
    total: int
