from __future__ import annotations

from fastapi import HTTPException, Request
from sqlalchemy.orm import Session

from app.models.comment import Comment
from app.models.page import Page
from app.schemas.api import CommentNodeOut, CommentOut, ModerationCommentOut
from app.services.comment_store import CommentStore
from app.services.submission import Actor
from app.services.thread_builder import ThreadNode
from app.utils.timezone import as_utc


def require_page(db: Session, store: CommentStore, page_id: str) -> Page:
    page = store.get_page(db, page_id)
    if page is None:
        raise HTTPException(status_code=404, detail='page not found')
    return page


def require_comment(db: Session, store: CommentStore, page_id: str, comment_id: str) -> Comment:
    comment = store.get(db, comment_id, page_id=page_id)
    if comment is None:
        raise HTTPException(status_code=404, detail='comment not found')
    return comment


def require_moderator(actor: Actor) -> None:
    if not actor.may_moderate:
        raise HTTPException(status_code=403, detail='moderation rights required')


def origin_address(request: Request) -> str | None:
    return request.client.host if request.client else None


def rate_limit_identity(actor: Actor, address: str | None) -> str:
    if actor.username:
        return f'user:{actor.username}'
    return f'ip:{address or "unknown"}'


def comment_out(comment: Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        legacy_id=comment.legacy_id,
        page_id=comment.page_id,
        parent_id=comment.parent_id,
        author=comment.author,
        body=comment.body,
        created_at=as_utc(comment.created_at),
        updated_at=as_utc(comment.updated_at) if comment.updated_at else None,
        status=comment.status,
        is_privileged_author=comment.is_privileged_author,
    )


def moderation_comment_out(comment: Comment) -> ModerationCommentOut:
    return ModerationCommentOut(
        **comment_out(comment).model_dump(),
        origin_address=comment.origin_address,
    )


def node_out(node: ThreadNode) -> CommentNodeOut:
    return CommentNodeOut(
        id=node.id,
        legacy_id=node.legacy_id,
        author=node.author,
        body=node.body,
        created_at=as_utc(node.created_at),
        updated_at=as_utc(node.updated_at) if node.updated_at else None,
        is_privileged_author=node.is_privileged_author,
        depth=node.depth,
        children=[node_out(child) for child in node.children],
    )
