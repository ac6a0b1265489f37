from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base
from app.schemas.common import CommentStatus


class Comment(Base):
    __tablename__ = 'comments'

    # Sequential key kept for sessions that still reference the old numeric ids.
    legacy_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(32), nullable=False, unique=True, index=True)
    page_id: Mapped[str] = mapped_column(ForeignKey('pages.id', ondelete='CASCADE'), nullable=False, index=True)
    # Self reference without a constraint: cycles and dangling links stay representable.
    parent_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)
    author: Mapped[str | None] = mapped_column(String(128), nullable=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    origin_address: Mapped[str | None] = mapped_column(String(128), nullable=True)
    edit_token: Mapped[str | None] = mapped_column(String(128), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=CommentStatus.pending.value)
    is_privileged_author: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index('ix_comments_page_status', 'page_id', 'status'),
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name='ck_comments_status'),
    )
