from __future__ import annotations

from datetime import datetime, timedelta, timezone
import os
from pathlib import Path
import sys
from typing import Callable
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[2]
BACKEND = ROOT / 'backend'
sys.path.insert(0, str(BACKEND))

TEST_DB_PATH = BACKEND / 'data' / 'test_app.db'
TEST_DB_PATH.parent.mkdir(parents=True, exist_ok=True)
if TEST_DB_PATH.exists():
    TEST_DB_PATH.unlink()
os.environ['DATABASE_URL'] = f"sqlite:///{TEST_DB_PATH.as_posix()}"
os.environ['SESSION_SECRET_KEY'] = 'test-secret'

from app.core.config import get_settings

get_settings.cache_clear()
from app.db.init_db import ensure_page, init_db

init_db()

from app.db.session import SessionLocal
from app.models.comment import Comment

BASE_TIME = datetime(2030, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_page() -> Callable[..., str]:
    def _make_page(tags: str = '') -> str:
        slug = f'page-{uuid4().hex[:12]}'
        with SessionLocal() as session:
            return ensure_page(session, slug, tags=[t for t in tags.split(',') if t]).id

    return _make_page


@pytest.fixture
def add_comment() -> Callable[..., str]:
    """Insert a comment row directly, bypassing the store's parent checks."""

    counter = {'n': 0}

    def _add_comment(
        page_id: str,
        *,
        comment_id: str | None = None,
        parent_id: str | None = None,
        status: str = 'approved',
        minutes: int | None = None,
        body: str = 'a comment body',
        author: str | None = 'tester',
        edit_token: str | None = None,
    ) -> str:
        counter['n'] += 1
        offset = counter['n'] if minutes is None else minutes
        cid = comment_id or f'{uuid4().int % 10**19:019d}'
        with SessionLocal() as session:
            session.add(
                Comment(
                    id=cid,
                    page_id=page_id,
                    parent_id=parent_id,
                    author=author,
                    body=body,
                    created_at=BASE_TIME + timedelta(minutes=offset),
                    status=status,
                    edit_token=edit_token or uuid4().hex,
                    is_privileged_author=False,
                )
            )
            session.commit()
        return cid

    return _add_comment


def pytest_sessionfinish(session, exitstatus):  # type: ignore[no-untyped-def]
    if TEST_DB_PATH.exists():
        try:
            TEST_DB_PATH.unlink()
        except PermissionError:
            pass
