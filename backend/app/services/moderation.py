from __future__ import annotations

from app.schemas.common import CommentStatus


def initial_status(is_privileged: bool) -> CommentStatus:
    """Status a new comment starts in; decided once, at submission time."""
    return CommentStatus.approved if is_privileged else CommentStatus.pending


def status_after_edit(current: CommentStatus | str, editor_is_admin: bool) -> CommentStatus:
    if editor_is_admin:
        return CommentStatus(current)
    return CommentStatus.pending


def parse_status(value: CommentStatus | str) -> CommentStatus:
    try:
        return CommentStatus(value)
    except ValueError as exc:
        allowed = ', '.join(status.value for status in CommentStatus)
        raise ValueError(f'status must be one of: {allowed}') from exc
