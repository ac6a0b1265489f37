from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.common import CommentStatus


class CommentNodeOut(BaseModel):
    id: str
    legacy_id: int
    author: str | None
    body: str
    created_at: datetime
    updated_at: datetime | None
    is_privileged_author: bool
    depth: int
    children: list[CommentNodeOut] = Field(default_factory=list)


class ThreadPageResponse(BaseModel):
    page_id: str
    page: int
    per_page: int
    has_previous: bool
    has_next: bool
    total_roots: int
    total_pages: int
    threads: list[CommentNodeOut]
    editable_ids: list[str]


class CommentSubmitRequest(BaseModel):
    body: str = ''
    author: str | None = None
    parent_id: str | None = None
    captcha: str = ''
    website: str = ''


class CommentEditRequest(BaseModel):
    body: str = ''
    author: str | None = None


class CommentOut(BaseModel):
    id: str
    legacy_id: int
    page_id: str
    parent_id: str | None
    author: str | None
    body: str
    created_at: datetime
    updated_at: datetime | None
    status: CommentStatus
    is_privileged_author: bool


class CommentSubmitResponse(BaseModel):
    comment: CommentOut
    message: str


class ModerationCommentOut(CommentOut):
    origin_address: str | None


class ModerationStatusRequest(BaseModel):
    status: CommentStatus


class ModerationSummary(BaseModel):
    pending_comments: int
    generated_at_utc: datetime


CommentNodeOut.model_rebuild()
