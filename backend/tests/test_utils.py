from __future__ import annotations

from app.db.init_db import ensure_page
from app.db.session import SessionLocal
from app.utils.ids import generate_snowflake, snowflake_timestamp
from app.utils.text import body_preview


def test_body_preview_flattens_and_cuts_on_word_boundary() -> None:
    assert body_preview('Hello\n\n  world', 50) == 'Hello world'
    assert body_preview('the quick brown fox jumps', 15) == 'the quick...'
    assert body_preview(None, 10) == ''
    assert body_preview('abcdefgh', 2) == 'ab'


def test_snowflakes_sort_lexically_in_creation_order() -> None:
    ids = [generate_snowflake() for _ in range(500)]
    assert all(len(value) == 19 and value.isdigit() for value in ids)
    assert ids == sorted(ids)
    assert len(set(ids)) == len(ids)
    assert snowflake_timestamp(ids[0]) is not None


def test_ensure_page_is_idempotent() -> None:
    with SessionLocal() as session:
        first = ensure_page(session, 'seeded-page', tags=['help', 'faq'])
        second = ensure_page(session, 'seeded-page', title='ignored')

    assert first.id == second.id
    assert second.title == 'seeded-page'
    assert second.tags == ['help', 'faq']
