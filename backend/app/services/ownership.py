from __future__ import annotations

import hmac
from typing import Iterable, MutableMapping, Protocol

SESSION_TOKENS_KEY = 'comment_tokens'

TokenMap = MutableMapping[str, str]


class OwnedComment(Protocol):
    id: str
    legacy_id: int
    edit_token: str | None


def session_token_map(session: MutableMapping[str, object]) -> dict[str, str]:
    """Return a copy of the session's comment token map.

    Reading never writes to the session, so anonymous readers get no cookie.
    Changes are persisted with `save_token_map`.
    """
    raw = session.get(SESSION_TOKENS_KEY)
    if not isinstance(raw, dict):
        return {}
    return {str(key): value for key, value in raw.items() if isinstance(value, str)}


def save_token_map(session: MutableMapping[str, object], tokens: TokenMap) -> None:
    # Assign a fresh dict: the session only notices top-level writes.
    if tokens == session_token_map(session):
        return
    if tokens:
        session[SESSION_TOKENS_KEY] = dict(tokens)
    else:
        session.pop(SESSION_TOKENS_KEY, None)


def remember_token(tokens: TokenMap, comment: OwnedComment) -> None:
    if comment.edit_token:
        tokens[comment.id] = comment.edit_token


def forget_token(tokens: TokenMap, comment_id: str, legacy_id: int | None = None) -> None:
    tokens.pop(comment_id, None)
    if legacy_id is not None:
        tokens.pop(str(legacy_id), None)


def _tokens_match(candidate: str | None, stored: str) -> bool:
    if not isinstance(candidate, str):
        return False
    return hmac.compare_digest(candidate.encode(), stored.encode())


def can_manage_comment(tokens: TokenMap, comment: OwnedComment, *, is_admin: bool = False) -> bool:
    """Decide whether the session may edit or delete ``comment``.

    Admins always may. Everyone else needs the comment's edit token in the
    session map, keyed by the durable id. An entry keyed by the old numeric
    id is still honoured once: on a match it is moved to the durable key.
    """
    if is_admin:
        return True
    stored = comment.edit_token
    if not stored:
        return False

    if comment.id in tokens:
        return _tokens_match(tokens[comment.id], stored)

    legacy_key = str(comment.legacy_id)
    if legacy_key in tokens and _tokens_match(tokens[legacy_key], stored):
        tokens[comment.id] = tokens.pop(legacy_key)
        return True
    return False


def editable_comment_ids(
    tokens: TokenMap,
    comments: Iterable[OwnedComment],
    *,
    is_admin: bool = False,
) -> list[str]:
    return [comment.id for comment in comments if can_manage_comment(tokens, comment, is_admin=is_admin)]
