from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.models.comment import Comment
from app.services.comment_store import CommentStore
from app.services.root_paginator import RootPaginator, RootWindow
from app.services.thread_builder import ThreadForest, build_threads

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class ThreadPage:
    window: RootWindow
    forest: ThreadForest
    comments: list[Comment]


class ThreadService:
    """Read side: root window plus reconstructed threads, computed fresh per call."""

    def __init__(self, settings: Settings, store: CommentStore, paginator: RootPaginator) -> None:
        self._settings = settings
        self._store = store
        self._paginator = paginator

    def reconstruct(self, session: Session, page_id: str, root_ids: Sequence[str]) -> tuple[ThreadForest, list[Comment]]:
        rows = self._store.list_approved_for_page(session, page_id)
        forest = build_threads(rows, root_ids)
        for anomaly in forest.anomalies:
            LOGGER.warning(
                'comment integrity: page=%s comment=%s parent=%s kind=%s, rendered as root',
                page_id,
                anomaly.comment_id,
                anomaly.stored_parent_id,
                anomaly.kind,
            )
        by_id = {row.id: row for row in rows}
        emitted = [by_id[node.id] for node in forest.walk()]
        return forest, emitted

    def render_page(
        self,
        session: Session,
        page_id: str,
        *,
        requested_page: int | None = None,
        page_size: int | None = None,
    ) -> ThreadPage:
        window = self._paginator.page(session, page_id, requested_page=requested_page, page_size=page_size)
        forest, comments = self.reconstruct(session, page_id, window.ids)
        return ThreadPage(window=window, forest=forest, comments=comments)
