"""
Snapshot differ.

Compares a baseline snapshot with a freshly built one and produces diff
events in an order that is safe to apply one by one:

* a created subtree is reported parent first (pre-order), so a consumer
  can create directories before the entries that live in them;
* a deleted subtree is reported deepest entry first (post-order), so a
  consumer can empty a directory before removing it.

Only the relative order inside one changed subtree is guaranteed. Sibling
entries are visited in name order, which keeps the output deterministic,
but consumers must not depend on it.
"""

from collections.abc import Iterable, Iterator

from dirpoll.models import DiffEvent, DiffKind, Node, Snapshot
from dirpoll.models.snapshot import join_path


def _created(node: Node, path: str) -> list[DiffEvent]:
    events = [DiffEvent(path=path, kind=DiffKind.CREATED)]
    events.extend(DiffEvent(path=p, kind=DiffKind.CREATED) for p, _ in node.walk("pre", prefix=path))
    return events


def _deleted(node: Node, path: str) -> list[DiffEvent]:
    events = [DiffEvent(path=p, kind=DiffKind.DELETED) for p, _ in node.walk("post", prefix=path)]
    events.append(DiffEvent(path=path, kind=DiffKind.DELETED))
    return events


def _compare_directories(old: Node, new: Node, prefix: str) -> list[DiffEvent | tuple[Node, Node, str]]:
    """
    Compare the children of two directory nodes.

    Returns the work for this level in emission order: ready events, and
    (old, new, path) pairs for same-named directories still to be compared.
    """
    work: list[DiffEvent | tuple[Node, Node, str]] = []

    for name in sorted(old.children):
        if name not in new.children:
            work.extend(_deleted(old.children[name], join_path(prefix, name)))

    for name in sorted(new.children):
        path = join_path(prefix, name)
        new_child = new.children[name]
        old_child = old.children.get(name)

        if old_child is None:
            work.extend(_created(new_child, path))
        elif old_child.is_dir != new_child.is_dir:
            # A type change cannot be a modification of one node.
            work.extend(_deleted(old_child, path))
            work.extend(_created(new_child, path))
        elif new_child.is_dir:
            work.append((old_child, new_child, path))
        elif new_child.mod_time > old_child.mod_time:
            work.append(DiffEvent(path=path, kind=DiffKind.MODIFIED))

    return work


def iter_diff(old: Snapshot | None, new: Snapshot) -> Iterator[DiffEvent]:
    """
    Yield the changes that turn ``old`` into ``new``.

    Args:
        old: Baseline snapshot, or None to report every entry of ``new`` as created
        new: Freshly built snapshot

    Yields:
        Diff events in a sequentially applicable order

    Raises:
        ValueError: If the snapshots were captured from different roots
    """
    if old is None:
        for path, _ in new.root.walk("pre"):
            yield DiffEvent(path=path, kind=DiffKind.CREATED)
        return

    if not old.is_comparable(new):
        raise ValueError(f"Cannot diff snapshots of different roots: {old.root_path} and {new.root_path}")

    # The roots are the same logical directory; only their contents are compared.
    stack: list[DiffEvent | tuple[Node, Node, str]] = [(old.root, new.root, "")]
    while stack:
        item = stack.pop()
        if isinstance(item, DiffEvent):
            yield item
            continue
        old_dir, new_dir, prefix = item
        stack.extend(reversed(_compare_directories(old_dir, new_dir, prefix)))


def diff(old: Snapshot | None, new: Snapshot) -> list[DiffEvent]:
    """Compute all changes between two snapshots. See ``iter_diff``."""
    return list(iter_diff(old, new))


def summarize(events: Iterable[DiffEvent]) -> dict[DiffKind, int]:
    """Count events per kind; every kind is present in the result."""
    counts = {kind: 0 for kind in DiffKind}
    for event in events:
        counts[event.kind] += 1
    return counts
