from __future__ import annotations

from enum import Enum


class CommentStatus(str, Enum):
    pending = 'pending'
    approved = 'approved'
    rejected = 'rejected'


class CommentAction(str, Enum):
    created = 'created'
    edited = 'edited'
    deleted = 'deleted'
