from __future__ import annotations

import math
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.models.comment import Comment
from app.schemas.common import CommentStatus
from app.services.thread_builder import find_root_ids


@dataclass(slots=True)
class RootWindow:
    ids: list[str]
    page: int
    per_page: int
    total_roots: int
    total_pages: int

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def resolve_page_size(raw_value: int | str | None, settings: Settings) -> int:
    options = settings.comment_page_size_options
    default = settings.comment_page_size_default
    if raw_value is None or raw_value == '':
        return default
    try:
        parsed = int(raw_value)
    except (TypeError, ValueError):
        return default
    if parsed in options:
        return parsed
    return default


class RootPaginator:
    """Pages over top-level threads only; replies never shift a root between pages."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def root_ids(self, session: Session, page_id: str) -> list[str]:
        # resolved in Python: a loop of parent links has no null parent to select on
        rows = session.execute(
            select(Comment.id, Comment.parent_id, Comment.created_at).where(
                Comment.page_id == page_id,
                Comment.status == CommentStatus.approved.value,
            )
        ).all()
        return find_root_ids(rows)

    def count_roots(self, session: Session, page_id: str) -> int:
        return len(self.root_ids(session, page_id))

    def page(
        self,
        session: Session,
        page_id: str,
        requested_page: int | None = None,
        page_size: int | None = None,
    ) -> RootWindow:
        per_page = resolve_page_size(page_size, self._settings)
        all_roots = self.root_ids(session, page_id)
        total_roots = len(all_roots)
        total_pages = max(1, math.ceil(total_roots / per_page))

        if requested_page is None:
            # newest discussion first: without an explicit page, open on the last one
            current = total_pages
        else:
            current = min(max(1, requested_page), total_pages)

        start = (current - 1) * per_page
        ids = all_roots[start : start + per_page]

        return RootWindow(
            ids=ids,
            page=current,
            per_page=per_page,
            total_roots=total_roots,
            total_pages=total_pages,
        )
