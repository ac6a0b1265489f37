from __future__ import annotations

from functools import lru_cache
from typing import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.db.session import SessionLocal
from app.services.comment_store import CommentStore
from app.services.events import EventDispatcher, LoggingEventDispatcher
from app.services.root_paginator import RootPaginator
from app.services.submission import (
    AcceptingCaptchaVerifier,
    Actor,
    AllowAllRateLimiter,
    BanChecker,
    CaptchaVerifier,
    NoBanChecker,
    RateLimiter,
    actor_from_session,
)
from app.services.thread_service import ThreadService


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_actor(request: Request) -> Actor:
    return actor_from_session(request.session.get('user'), get_settings())


@lru_cache(maxsize=1)
def get_comment_store() -> CommentStore:
    return CommentStore(settings=get_settings())


@lru_cache(maxsize=1)
def get_root_paginator() -> RootPaginator:
    return RootPaginator(settings=get_settings())


@lru_cache(maxsize=1)
def get_thread_service() -> ThreadService:
    return ThreadService(
        settings=get_settings(),
        store=get_comment_store(),
        paginator=get_root_paginator(),
    )


@lru_cache(maxsize=1)
def get_rate_limiter() -> RateLimiter:
    return AllowAllRateLimiter()


@lru_cache(maxsize=1)
def get_ban_checker() -> BanChecker:
    return NoBanChecker()


@lru_cache(maxsize=1)
def get_captcha_verifier() -> CaptchaVerifier:
    return AcceptingCaptchaVerifier()


@lru_cache(maxsize=1)
def get_event_dispatcher() -> EventDispatcher:
    return LoggingEventDispatcher()
