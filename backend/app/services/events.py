from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Protocol

from app.core.config import Settings
from app.models.comment import Comment
from app.schemas.common import CommentAction
from app.services.submission import ANONYMOUS_LABEL
from app.utils.text import body_preview

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CommentEvent:
    action: str
    page_id: str
    comment_id: str
    author: str
    body_preview: str
    status: str
    origin_address: str | None
    actor: str | None = None


class EventDispatcher(Protocol):
    def dispatch(self, event: CommentEvent) -> None: ...


class LoggingEventDispatcher:
    def dispatch(self, event: CommentEvent) -> None:
        LOGGER.info('comment event %s', asdict(event))


def build_comment_event(
    action: CommentAction,
    comment: Comment,
    settings: Settings,
    *,
    actor: str | None = None,
) -> CommentEvent:
    # Snapshot now: the row may be gone by the time the dispatcher runs.
    return CommentEvent(
        action=action.value,
        page_id=comment.page_id,
        comment_id=comment.id,
        author=comment.author or ANONYMOUS_LABEL,
        body_preview=body_preview(comment.body, settings.comment_preview_length),
        status=comment.status,
        origin_address=comment.origin_address,
        actor=actor,
    )
