from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.deps import get_actor, get_comment_store, get_db
from app.api.route_utils import moderation_comment_out, require_moderator
from app.schemas.api import ModerationCommentOut, ModerationStatusRequest, ModerationSummary
from app.schemas.common import CommentStatus
from app.services.comment_store import CommentStore
from app.services.submission import Actor
from app.utils.timezone import utc_now

router = APIRouter(prefix='/moderation')


@router.get('/comments', response_model=list[ModerationCommentOut])
def list_moderation_queue(
    status: CommentStatus = Query(default=CommentStatus.pending),
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: CommentStore = Depends(get_comment_store),
) -> list[ModerationCommentOut]:
    require_moderator(actor)
    return [moderation_comment_out(row) for row in store.list_by_status(db, status, limit=limit)]


@router.post('/comments/{comment_id}/status', response_model=ModerationCommentOut)
def set_comment_status(
    comment_id: str,
    payload: ModerationStatusRequest,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: CommentStore = Depends(get_comment_store),
) -> ModerationCommentOut:
    require_moderator(actor)
    comment = store.set_status(db, comment_id, payload.status)
    if comment is None:
        raise HTTPException(status_code=404, detail='comment not found')
    return moderation_comment_out(comment)


@router.get('/summary', response_model=ModerationSummary)
def get_moderation_summary(
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: CommentStore = Depends(get_comment_store),
) -> ModerationSummary:
    require_moderator(actor)
    return ModerationSummary(
        pending_comments=store.count_by_status(db, CommentStatus.pending),
        generated_at_utc=utc_now(),
    )
