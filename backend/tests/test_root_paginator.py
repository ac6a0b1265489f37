from __future__ import annotations

from app.core.config import Settings, get_settings
from app.db.session import SessionLocal
from app.services.comment_store import CommentStore
from app.services.root_paginator import RootPaginator, resolve_page_size
from app.services.thread_service import ThreadService


def _paginator() -> RootPaginator:
    return RootPaginator(get_settings())


def test_resolve_page_size_accepts_only_configured_options() -> None:
    settings = Settings(comment_page_size_default=10, comment_page_size_options_csv='5,10,50')
    assert resolve_page_size(None, settings) == 10
    assert resolve_page_size('', settings) == 10
    assert resolve_page_size('50', settings) == 50
    assert resolve_page_size(5, settings) == 5
    assert resolve_page_size(7, settings) == 10
    assert resolve_page_size('abc', settings) == 10


def test_count_roots_ignores_replies_and_unapproved(make_page, add_comment) -> None:
    page_id = make_page()
    root_a = add_comment(page_id, minutes=0)
    add_comment(page_id, minutes=1)
    for i in range(5):
        add_comment(page_id, parent_id=root_a, minutes=2 + i)
    add_comment(page_id, status='pending', minutes=10)
    add_comment(page_id, status='rejected', minutes=11)

    with SessionLocal() as session:
        assert _paginator().count_roots(session, page_id) == 2


def test_default_window_is_last_page(make_page, add_comment) -> None:
    page_id = make_page()
    roots = [add_comment(page_id, minutes=i) for i in range(12)]

    with SessionLocal() as session:
        window = _paginator().page(session, page_id, page_size=5)

    assert window.total_roots == 12
    assert window.total_pages == 3
    assert window.page == 3
    assert window.ids == roots[10:]
    assert window.has_previous is True
    assert window.has_next is False


def test_explicit_page_and_clamping(make_page, add_comment) -> None:
    page_id = make_page()
    roots = [add_comment(page_id, minutes=i) for i in range(12)]
    paginator = _paginator()

    with SessionLocal() as session:
        first = paginator.page(session, page_id, requested_page=1, page_size=5)
        beyond = paginator.page(session, page_id, requested_page=99, page_size=5)

    assert first.ids == roots[:5]
    assert first.has_previous is False
    assert first.has_next is True
    assert beyond.page == 3
    assert beyond.ids == roots[10:]


def test_empty_page_yields_first_empty_window(make_page) -> None:
    page_id = make_page()

    with SessionLocal() as session:
        window = _paginator().page(session, page_id)

    assert window.ids == []
    assert window.page == 1
    assert window.total_pages == 1
    assert window.has_previous is False
    assert window.has_next is False


def test_reply_count_never_moves_roots_between_pages(make_page, add_comment) -> None:
    page_id = make_page()
    busy_root = add_comment(page_id, minutes=0)
    quiet_root = add_comment(page_id, minutes=1)
    reply_ids = []
    parent = busy_root
    for i in range(30):
        parent = add_comment(page_id, parent_id=parent if i % 2 else busy_root, minutes=2 + i)
        reply_ids.append(parent)

    settings = get_settings()
    store = CommentStore(settings)
    service = ThreadService(settings, store, RootPaginator(settings))

    with SessionLocal() as session:
        first = service.render_page(session, page_id, requested_page=1, page_size=5)

    assert first.window.ids == [busy_root, quiet_root]
    emitted = {node.id for node in first.forest.walk()}
    assert set(reply_ids) <= emitted
    assert {row.id for row in first.comments} == emitted


def test_orphan_left_by_delete_becomes_a_root(make_page, add_comment) -> None:
    page_id = make_page()
    root_id = add_comment(page_id, minutes=0)
    reply_id = add_comment(page_id, parent_id=root_id, minutes=1)
    grandchild_id = add_comment(page_id, parent_id=reply_id, minutes=2)

    settings = get_settings()
    store = CommentStore(settings)
    service = ThreadService(settings, store, RootPaginator(settings))

    with SessionLocal() as session:
        store.delete(session, root_id)
        result = service.render_page(session, page_id, page_size=10)

    assert result.window.ids == [reply_id]
    assert [(node.id, node.depth) for node in result.forest.walk()] == [(reply_id, 0), (grandchild_id, 1)]


def test_self_parented_comment_counts_as_root(make_page, add_comment) -> None:
    page_id = make_page()
    add_comment(page_id, comment_id='0000000000000000042', parent_id='0000000000000000042', minutes=0)

    with SessionLocal() as session:
        window = _paginator().page(session, page_id)

    assert window.ids == ['0000000000000000042']


def test_two_comment_loop_and_its_reply_surface_on_a_page(make_page, add_comment) -> None:
    page_id = make_page()
    first = '0000000000000000501'
    second = '0000000000000000502'
    add_comment(page_id, comment_id=first, parent_id=second, minutes=0)
    add_comment(page_id, comment_id=second, parent_id=first, minutes=1)
    reply = add_comment(page_id, parent_id=first, minutes=2)
    plain_root = add_comment(page_id, minutes=3)

    settings = get_settings()
    service = ThreadService(settings, CommentStore(settings), RootPaginator(settings))

    with SessionLocal() as session:
        assert _paginator().count_roots(session, page_id) == 2
        result = service.render_page(session, page_id, page_size=10)

    assert result.window.ids == [first, plain_root]
    assert [(node.id, node.depth) for node in result.forest.walk()] == [
        (first, 0),
        (second, 1),
        (reply, 1),
        (plain_root, 0),
    ]
