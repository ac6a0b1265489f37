from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, Protocol, Sequence

from app.utils.timezone import as_utc

SELF_PARENT = 'self_parent'
CYCLE = 'cycle'
DANGLING_PARENT = 'dangling_parent'


class CommentRow(Protocol):
    id: str
    legacy_id: int
    parent_id: str | None
    author: str | None
    body: str
    created_at: datetime
    updated_at: datetime | None
    is_privileged_author: bool


@dataclass(slots=True)
class ThreadNode:
    id: str
    legacy_id: int
    author: str | None
    body: str
    created_at: datetime
    updated_at: datetime | None
    is_privileged_author: bool
    depth: int
    children: list[ThreadNode] = field(default_factory=list)


@dataclass(slots=True, frozen=True)
class ThreadAnomaly:
    comment_id: str
    stored_parent_id: str | None
    kind: str


@dataclass(slots=True)
class ThreadForest:
    roots: list[ThreadNode]
    anomalies: list[ThreadAnomaly]

    def walk(self) -> Iterable[ThreadNode]:
        stack = list(reversed(self.roots))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def order_key(row: CommentRow) -> tuple[datetime, str]:
    return as_utc(row.created_at), row.id


def build_threads(rows: Iterable[CommentRow], requested_root_ids: Sequence[str]) -> ThreadForest:
    """Expand the requested roots of one page into nested threads.

    ``rows`` are the approved comments of the page at any depth. Parent links
    are validated before adjacency is built: a comment whose parent does not
    resolve, or whose ancestry loops back to itself, is treated as a root.
    Only the requested roots and their descendants are emitted, each root
    exactly once and in the requested order.
    """
    by_id: dict[str, CommentRow] = {}
    raw_children: dict[str, list[CommentRow]] = defaultdict(list)
    for row in rows:
        if row.id in by_id:
            continue
        by_id[row.id] = row
        if row.parent_id is not None:
            raw_children[row.parent_id].append(row)

    requested: list[str] = []
    for root_id in requested_root_ids:
        if root_id in by_id and root_id not in requested:
            requested.append(root_id)
    requested_set = set(requested)

    closure = _closure(by_id, raw_children, requested)
    anomalies: dict[tuple[str, str], ThreadAnomaly] = {}
    for root_id in requested:
        anomaly = _classify_stored_parent(by_id[root_id], by_id)
        if anomaly is not None:
            anomalies[(anomaly.comment_id, anomaly.kind)] = anomaly

    parents = _validated_parents(closure, requested_set, anomalies)

    adjacency: dict[str, list[CommentRow]] = defaultdict(list)
    for node_id, parent_id in parents.items():
        if parent_id is not None:
            adjacency[parent_id].append(closure[node_id])
    for siblings in adjacency.values():
        siblings.sort(key=order_key)

    roots: list[ThreadNode] = []
    for root_id in requested:
        root = _to_node(closure[root_id], depth=0)
        roots.append(root)
        stack = [root]
        while stack:
            node = stack.pop()
            for child_row in adjacency.get(node.id, ()):
                child = _to_node(child_row, depth=node.depth + 1)
                node.children.append(child)
                stack.append(child)

    return ThreadForest(roots=roots, anomalies=list(anomalies.values()))


def find_root_ids(rows: Iterable[CommentRow]) -> list[str]:
    """Ids of the comments that head a thread, oldest first.

    A comment heads a thread when its parent is unset or missing from
    ``rows``. For every stored loop of parent links (self-parents included)
    the earliest member by ``(created_at, id)`` heads the thread, so comments
    on or below a loop still land on some page.
    """
    by_id: dict[str, CommentRow] = {}
    for row in rows:
        by_id.setdefault(row.id, row)

    head: dict[str, str] = {}
    for start_id in by_id:
        if start_id in head:
            continue
        path: list[str] = []
        position: dict[str, int] = {}
        cursor = start_id
        while cursor not in head:
            if cursor in position:
                loop = path[position[cursor]:]
                leader = min(loop, key=lambda member: order_key(by_id[member]))
                for member in loop:
                    head[member] = leader
                break
            position[cursor] = len(path)
            path.append(cursor)
            parent_id = by_id[cursor].parent_id
            if parent_id is None or parent_id not in by_id:
                head[cursor] = cursor
                break
            cursor = parent_id

        for member in reversed(path):
            if member not in head:
                head[member] = head[by_id[member].parent_id]

    roots = [by_id[node_id] for node_id, head_id in head.items() if node_id == head_id]
    roots.sort(key=order_key)
    return [row.id for row in roots]


def _closure(
    by_id: dict[str, CommentRow],
    raw_children: dict[str, list[CommentRow]],
    requested: list[str],
) -> dict[str, CommentRow]:
    closure = {root_id: by_id[root_id] for root_id in requested}
    frontier = list(requested)
    while frontier:
        current = frontier.pop()
        for child in raw_children.get(current, ()):
            if child.id in closure:
                continue
            closure[child.id] = child
            frontier.append(child.id)
    return closure


def _validated_parents(
    index: dict[str, CommentRow],
    requested_set: set[str],
    anomalies: dict[tuple[str, str], ThreadAnomaly],
) -> dict[str, str | None]:
    resolved: dict[str, str | None] = {}

    for start_id in index:
        if start_id in resolved:
            continue
        path: list[str] = []
        position: dict[str, int] = {}
        cursor = start_id
        while cursor not in resolved:
            if cursor in position:
                # every comment on the loop re-roots itself
                for member in path[position[cursor]:]:
                    resolved[member] = None
                    row = index[member]
                    kind = SELF_PARENT if row.parent_id == member else CYCLE
                    anomalies.setdefault((member, kind), ThreadAnomaly(member, row.parent_id, kind))
                break
            position[cursor] = len(path)
            path.append(cursor)
            row = index[cursor]
            if cursor in requested_set or row.parent_id is None:
                resolved[cursor] = None
                break
            if row.parent_id not in index:
                resolved[cursor] = None
                anomalies.setdefault(
                    (cursor, DANGLING_PARENT),
                    ThreadAnomaly(cursor, row.parent_id, DANGLING_PARENT),
                )
                break
            cursor = row.parent_id

        for member in path:
            resolved.setdefault(member, index[member].parent_id)

    return resolved


def _classify_stored_parent(row: CommentRow, by_id: dict[str, CommentRow]) -> ThreadAnomaly | None:
    parent_id = row.parent_id
    if parent_id is None:
        return None
    if parent_id == row.id:
        return ThreadAnomaly(row.id, parent_id, SELF_PARENT)
    if parent_id not in by_id:
        return ThreadAnomaly(row.id, parent_id, DANGLING_PARENT)

    seen = {row.id}
    cursor: str | None = parent_id
    while cursor is not None and cursor in by_id:
        if cursor in seen:
            # the loop may sit above this comment; only report it when it comes back here
            return ThreadAnomaly(row.id, parent_id, CYCLE) if cursor == row.id else None
        seen.add(cursor)
        cursor = by_id[cursor].parent_id
    return None


def _to_node(row: CommentRow, *, depth: int) -> ThreadNode:
    return ThreadNode(
        id=row.id,
        legacy_id=row.legacy_id,
        author=row.author,
        body=row.body,
        created_at=row.created_at,
        updated_at=row.updated_at,
        is_privileged_author=bool(row.is_privileged_author),
        depth=depth,
    )
