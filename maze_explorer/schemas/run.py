"""Run result schema."""

from typing import Any, Optional

from pydantic import BaseModel, Field


class RunResult(BaseModel):
    """Schema for the outcome of one exploration run."""

    success: bool
    start: dict[str, Any]
    end: Optional[dict[str, Any]] = None
    moves: int = Field(..., ge=0)
    locations_discovered: int = Field(..., ge=1)
