from __future__ import annotations

from types import SimpleNamespace

from app.services.ownership import (
    SESSION_TOKENS_KEY,
    can_manage_comment,
    editable_comment_ids,
    forget_token,
    remember_token,
    save_token_map,
    session_token_map,
)


def _comment(comment_id: str = '0000000000000000777', legacy_id: int = 7, token: str | None = 'secret-token'):
    return SimpleNamespace(id=comment_id, legacy_id=legacy_id, edit_token=token)


def test_admin_may_manage_without_tokens() -> None:
    assert can_manage_comment({}, _comment(), is_admin=True) is True
    assert can_manage_comment({}, _comment(token=None), is_admin=True) is True


def test_durable_key_match_authorizes() -> None:
    comment = _comment()
    tokens = {comment.id: 'secret-token'}
    assert can_manage_comment(tokens, comment) is True
    assert tokens == {comment.id: 'secret-token'}


def test_wrong_or_missing_token_is_denied() -> None:
    comment = _comment()
    assert can_manage_comment({}, comment) is False
    assert can_manage_comment({comment.id: 'other'}, comment) is False
    assert can_manage_comment({'999': 'secret-token'}, comment) is False


def test_comment_without_stored_token_is_never_owned() -> None:
    comment = _comment(token=None)
    assert can_manage_comment({comment.id: 'anything'}, comment) is False


def test_legacy_key_authorizes_and_migrates_once() -> None:
    comment = _comment()
    tokens = {'7': 'secret-token'}

    assert can_manage_comment(tokens, comment) is True
    assert tokens == {comment.id: 'secret-token'}

    assert can_manage_comment(tokens, comment) is True
    assert tokens == {comment.id: 'secret-token'}


def test_mismatched_legacy_token_leaves_session_untouched() -> None:
    comment = _comment()
    tokens = {'7': 'stale-token'}

    assert can_manage_comment(tokens, comment) is False
    assert tokens == {'7': 'stale-token'}


def test_durable_entry_takes_precedence_over_legacy_entry() -> None:
    comment = _comment()
    tokens = {comment.id: 'wrong', '7': 'secret-token'}

    assert can_manage_comment(tokens, comment) is False
    assert tokens == {comment.id: 'wrong', '7': 'secret-token'}


def test_reading_the_token_map_never_writes_the_session() -> None:
    session: dict = {}
    tokens = session_token_map(session)
    tokens['abc'] = 'x'
    assert session == {}

    save_token_map(session, tokens)
    assert session[SESSION_TOKENS_KEY] == {'abc': 'x'}
    assert session[SESSION_TOKENS_KEY] is not tokens


def test_save_token_map_skips_unchanged_and_drops_empty_maps() -> None:
    stored = {'abc': 'x'}
    session: dict = {SESSION_TOKENS_KEY: stored}

    save_token_map(session, {'abc': 'x'})
    assert session[SESSION_TOKENS_KEY] is stored

    save_token_map(session, {})
    assert SESSION_TOKENS_KEY not in session


def test_remember_and_forget_token() -> None:
    comment = _comment()
    tokens: dict[str, str] = {'7': 'secret-token'}

    remember_token(tokens, comment)
    assert tokens[comment.id] == 'secret-token'

    forget_token(tokens, comment.id, comment.legacy_id)
    assert tokens == {}


def test_editable_ids_lists_owned_comments_and_migrates_legacy_keys() -> None:
    owned = _comment('0000000000000000001', 1, 't1')
    legacy_owned = _comment('0000000000000000002', 2, 't2')
    foreign = _comment('0000000000000000003', 3, 't3')
    tokens = {owned.id: 't1', '2': 't2'}

    ids = editable_comment_ids(tokens, [owned, legacy_owned, foreign])

    assert ids == [owned.id, legacy_owned.id]
    assert tokens == {owned.id: 't1', legacy_owned.id: 't2'}
    assert editable_comment_ids({}, [owned, foreign], is_admin=True) == [owned.id, foreign.id]
