"""
Data models for point-in-time captures of a directory tree.

A ``Snapshot`` owns a tree of ``Node`` objects mirroring the directory
hierarchy under a tracked root. Both are frozen once built; a poller
replaces its snapshot wholesale rather than mutating it.
"""

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import PurePosixPath
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def join_path(prefix: str, name: str) -> str:
    """Join a relative parent path and an entry name with '/'."""
    return f"{prefix}/{name}" if prefix else name


class EntryInfo(BaseModel):
    """Metadata for a single entry as reported by a filesystem capability."""

    name: str = Field(..., description="Base name of the entry")
    is_dir: bool = Field(..., description="Whether the entry is a directory")
    mod_time: datetime = Field(..., description="Last modification time")

    model_config = ConfigDict(frozen=True)

    @field_validator('mod_time')
    @classmethod
    def validate_mod_time(cls, v):
        """Interpret naive timestamps as UTC."""
        return _as_utc(v)


class Node(BaseModel):
    """
    One filesystem entry at snapshot time.

    Only directories carry children; the children mapping is keyed by the
    child's base name.
    """

    name: str = Field(..., description="Base name of the entry (not the full path)")
    is_dir: bool = Field(..., description="Whether the entry is a directory")
    mod_time: datetime = Field(..., description="Last modification time")
    children: dict[str, "Node"] = Field(default_factory=dict, description="Child nodes keyed by name")

    model_config = ConfigDict(frozen=True)

    @field_validator('mod_time')
    @classmethod
    def validate_mod_time(cls, v):
        """Interpret naive timestamps as UTC."""
        return _as_utc(v)

    @model_validator(mode='after')
    def validate_children(self):
        """Ensure only directories have children and keys match child names."""
        if self.children and not self.is_dir:
            raise ValueError(f"non-directory node '{self.name}' cannot have children")
        for key, child in self.children.items():
            if key != child.name:
                raise ValueError(f"child key '{key}' does not match child name '{child.name}'")
        return self

    @classmethod
    def from_entry(cls, entry: EntryInfo, children: dict[str, "Node"] | None = None) -> "Node":
        """Build a node from filesystem metadata."""
        return cls(name=entry.name, is_dir=entry.is_dir, mod_time=entry.mod_time, children=children or {})

    def walk(self, order: Literal["pre", "post"] = "pre", prefix: str = "") -> Iterator[tuple[str, "Node"]]:
        """
        Iterate over all descendants of this node.

        Siblings are visited in name order. In pre-order a directory is
        yielded before its descendants, in post-order after them. The node
        itself is not yielded.

        Args:
            order: "pre" or "post"
            prefix: Relative path of this node, prepended to yielded paths

        Yields:
            (relative_path, node) tuples
        """
        if order not in ("pre", "post"):
            raise ValueError(f"Unknown traversal order: {order}")

        # Explicit stack so depth is bounded by memory, not the recursion limit.
        stack: list[tuple[str, Node, bool]] = [
            (join_path(prefix, name), self.children[name], False) for name in sorted(self.children, reverse=True)
        ]
        while stack:
            path, node, expanded = stack.pop()
            if expanded:
                yield path, node
                continue

            if order == "pre":
                yield path, node
            else:
                stack.append((path, node, True))

            for name in sorted(node.children, reverse=True):
                stack.append((join_path(path, name), node.children[name], False))

    def count(self) -> int:
        """Number of descendants of this node."""
        return sum(1 for _ in self.walk())

    def __str__(self) -> str:
        kind = "dir" if self.is_dir else "file"
        return f"Node({kind}: {self.name})"


Node.model_rebuild()


class Snapshot(BaseModel):
    """
    Immutable capture of a directory tree at one instant.

    Two snapshots are comparable only if captured from the same logical root.
    """

    root_path: str = Field(..., min_length=1, description="Root path the snapshot was captured from")
    root: Node = Field(..., description="Root node of the captured tree")
    captured_at: datetime = Field(default_factory=lambda: datetime.now(UTC), description="Capture timestamp")

    model_config = ConfigDict(frozen=True)

    @field_validator('root_path')
    @classmethod
    def validate_root_path(cls, v):
        """Normalise the root path so equivalent spellings compare equal."""
        return str(PurePosixPath(v))

    @field_validator('root')
    @classmethod
    def validate_root(cls, v):
        """The tracked root must be a directory."""
        if not v.is_dir:
            raise ValueError("snapshot root must be a directory")
        return v

    @computed_field
    @property
    def entry_count(self) -> int:
        """Number of entries below the root."""
        return self.root.count()

    def is_comparable(self, other: "Snapshot") -> bool:
        """Check whether both snapshots were captured from the same root."""
        return self.root_path == other.root_path

    def find(self, path: str) -> Node | None:
        """
        Look up the node at a relative path.

        Args:
            path: '/' separated path relative to the root; "" or "." is the root

        Returns:
            The node, or None if no entry exists at that path
        """
        node = self.root
        for part in PurePosixPath(path).parts:
            if part in ("/", "."):
                continue
            child = node.children.get(part)
            if child is None:
                return None
            node = child
        return node

    def paths(self) -> list[str]:
        """All relative paths in the snapshot, parents before children."""
        return [path for path, _ in self.root.walk()]

    def __str__(self) -> str:
        return f"Snapshot({self.root_path}: {self.entry_count} entries)"
