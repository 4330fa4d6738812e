"""
Diff event models emitted by the differ and delivered by the poller.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DiffKind(str, Enum):
    """Kind of change observed for a path between two snapshots."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


class DiffEvent(BaseModel):
    """
    One reported change attached to a path relative to the tracked root.

    Events are immutable value records. A path whose type changes between
    snapshots is reported as a DELETED event followed by a CREATED event.
    """

    path: str = Field(..., min_length=1, description="Relative path from the snapshot root, '/' separated")
    kind: DiffKind = Field(..., description="Kind of change")

    model_config = ConfigDict(frozen=True)

    @field_validator('path')
    @classmethod
    def validate_path(cls, v):
        """Ensure the path is relative to the root."""
        if v.startswith('/') or v.startswith('./') or v == '.':
            raise ValueError("path must be relative to the snapshot root")
        return v

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.path}"

