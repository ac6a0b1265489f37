from __future__ import annotations

import logging
import secrets

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.models.comment import Comment
from app.models.page import Page
from app.schemas.common import CommentStatus
from app.services.moderation import initial_status, parse_status, status_after_edit
from app.utils.ids import generate_snowflake
from app.utils.timezone import utc_now

LOGGER = logging.getLogger(__name__)


class InvalidParentError(ValueError):
    pass


def new_edit_token() -> str:
    return secrets.token_urlsafe(32)


class CommentStore:
    """Single-row reads and writes on the comments table.

    Missing pages or comments are reported as ``None``/``False`` rather than
    raised; every write commits immediately and the last write wins.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def get_page(self, session: Session, page_id: str) -> Page | None:
        return session.get(Page, page_id)

    def get(self, session: Session, comment_id: str, *, page_id: str | None = None) -> Comment | None:
        stmt = select(Comment).where(Comment.id == comment_id)
        if page_id is not None:
            stmt = stmt.where(Comment.page_id == page_id)
        return session.execute(stmt).scalar_one_or_none()

    def create(
        self,
        session: Session,
        *,
        page_id: str,
        author: str | None,
        body: str,
        parent_id: str | None = None,
        is_privileged: bool = False,
        origin_address: str | None = None,
    ) -> Comment | None:
        if self.get_page(session, page_id) is None:
            return None

        if parent_id is not None:
            parent = self.get(session, parent_id, page_id=page_id)
            if parent is None or parent.status != CommentStatus.approved.value:
                raise InvalidParentError(f'parent comment not found on this page: {parent_id}')

        comment = Comment(
            id=generate_snowflake(),
            page_id=page_id,
            parent_id=parent_id,
            author=author or None,
            body=body,
            created_at=utc_now(),
            updated_at=None,
            origin_address=origin_address or None,
            edit_token=new_edit_token(),
            status=initial_status(is_privileged).value,
            is_privileged_author=is_privileged,
        )
        session.add(comment)
        session.commit()
        session.refresh(comment)
        return comment

    def update_body(
        self,
        session: Session,
        comment_id: str,
        new_body: str,
        *,
        editor_is_admin: bool,
        author: str | None = None,
    ) -> Comment | None:
        comment = self.get(session, comment_id)
        if comment is None:
            return None
        comment.body = new_body
        if author is not None:
            comment.author = author or None
        comment.updated_at = utc_now()
        comment.status = status_after_edit(comment.status, editor_is_admin).value
        session.commit()
        session.refresh(comment)
        return comment

    def set_status(self, session: Session, comment_id: str, new_status: CommentStatus | str) -> Comment | None:
        status = parse_status(new_status)
        comment = self.get(session, comment_id)
        if comment is None:
            return None
        previous = comment.status
        if previous != status.value:
            comment.status = status.value
            session.commit()
            session.refresh(comment)
            LOGGER.info('comment %s moderated: %s -> %s', comment.id, previous, status.value)
        return comment

    def delete(self, session: Session, comment_id: str) -> bool:
        # Point delete: replies keep their parent_id and are re-rooted on read.
        result = session.execute(delete(Comment).where(Comment.id == comment_id))
        session.commit()
        deleted = bool(result.rowcount)
        if deleted:
            LOGGER.info('comment %s deleted', comment_id)
        return deleted

    def list_approved_for_page(self, session: Session, page_id: str) -> list[Comment]:
        return list(
            session.execute(
                select(Comment)
                .where(
                    Comment.page_id == page_id,
                    Comment.status == CommentStatus.approved.value,
                )
                .order_by(Comment.created_at.asc(), Comment.id.asc())
            ).scalars().all()
        )

    def list_by_status(
        self,
        session: Session,
        status: CommentStatus | str,
        *,
        limit: int | None = None,
    ) -> list[Comment]:
        stmt = (
            select(Comment)
            .where(Comment.status == parse_status(status).value)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .limit(limit or self._settings.moderation_queue_limit)
        )
        return list(session.execute(stmt).scalars().all())

    def count_by_status(self, session: Session, status: CommentStatus | str) -> int:
        return int(
            session.execute(
                select(func.count()).select_from(Comment).where(Comment.status == parse_status(status).value)
            ).scalar_one()
        )
