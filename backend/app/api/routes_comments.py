from __future__ import annotations

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, Response
from sqlalchemy.orm import Session

from app.api.deps import (
    get_actor,
    get_ban_checker,
    get_captcha_verifier,
    get_comment_store,
    get_db,
    get_event_dispatcher,
    get_rate_limiter,
    get_thread_service,
)
from app.api.route_utils import (
    comment_out,
    node_out,
    origin_address,
    rate_limit_identity,
    require_comment,
    require_page,
)
from app.core.config import get_settings
from app.schemas.api import (
    CommentEditRequest,
    CommentOut,
    CommentSubmitRequest,
    CommentSubmitResponse,
    ThreadPageResponse,
)
from app.schemas.common import CommentAction, CommentStatus
from app.services.comment_store import CommentStore, InvalidParentError
from app.services.events import EventDispatcher, build_comment_event
from app.services.ownership import (
    can_manage_comment,
    editable_comment_ids,
    forget_token,
    remember_token,
    save_token_map,
    session_token_map,
)
from app.services.submission import (
    Actor,
    BanChecker,
    CaptchaVerifier,
    RateLimiter,
    SubmissionForm,
    validate_comment_body,
    validate_comment_submission,
)
from app.services.thread_service import ThreadService

router = APIRouter()
settings = get_settings()


@router.get('/pages/{page_id}/comments', response_model=ThreadPageResponse)
def list_page_comments(
    page_id: str,
    request: Request,
    page: int | None = Query(default=None, ge=1),
    per_page: int | None = Query(default=None),
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: CommentStore = Depends(get_comment_store),
    thread_service: ThreadService = Depends(get_thread_service),
) -> ThreadPageResponse:
    require_page(db, store, page_id)
    result = thread_service.render_page(db, page_id, requested_page=page, page_size=per_page)
    tokens = session_token_map(request.session)
    window = result.window
    response = ThreadPageResponse(
        page_id=page_id,
        page=window.page,
        per_page=window.per_page,
        has_previous=window.has_previous,
        has_next=window.has_next,
        total_roots=window.total_roots,
        total_pages=window.total_pages,
        threads=[node_out(root) for root in result.forest.roots],
        editable_ids=editable_comment_ids(tokens, result.comments, is_admin=actor.is_admin),
    )
    save_token_map(request.session, tokens)
    return response


@router.post('/pages/{page_id}/comments', response_model=CommentSubmitResponse, status_code=201)
def submit_comment(
    page_id: str,
    payload: CommentSubmitRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: CommentStore = Depends(get_comment_store),
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
    ban_checker: BanChecker = Depends(get_ban_checker),
    captcha_verifier: CaptchaVerifier = Depends(get_captcha_verifier),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> CommentSubmitResponse:
    page = require_page(db, store, page_id)
    if not actor.can_comment:
        raise HTTPException(status_code=403, detail='commenting is not allowed for this account')

    address = origin_address(request)
    if not rate_limiter.allow(rate_limit_identity(actor, address)):
        raise HTTPException(status_code=429, detail='too many comments, please wait before posting again')

    ban = ban_checker.find_ban(address, 'comment', page.tags)
    if ban is not None:
        raise HTTPException(status_code=403, detail=ban.reason or 'commenting on this page is not allowed')

    validated = validate_comment_submission(
        SubmissionForm(
            author=payload.author or '',
            body=payload.body,
            captcha=payload.captcha,
            honeypot=payload.website,
        ),
        settings,
        captcha_verifier,
    )
    if not validated.ok:
        raise HTTPException(status_code=422, detail=validated.errors)

    author = validated.author or actor.username
    try:
        comment = store.create(
            db,
            page_id=page_id,
            author=author,
            body=validated.body,
            parent_id=payload.parent_id or None,
            is_privileged=actor.is_privileged,
            origin_address=address,
        )
    except InvalidParentError as exc:
        raise HTTPException(status_code=422, detail=[str(exc)]) from exc
    if comment is None:
        raise HTTPException(status_code=404, detail='page not found')

    tokens = session_token_map(request.session)
    remember_token(tokens, comment)
    save_token_map(request.session, tokens)
    background_tasks.add_task(
        dispatcher.dispatch,
        build_comment_event(CommentAction.created, comment, settings, actor=actor.username),
    )

    if comment.status == CommentStatus.approved.value:
        message = 'Thanks! Your comment is published.'
    else:
        message = 'Thanks! Your comment was saved and will be published after review.'
    return CommentSubmitResponse(comment=comment_out(comment), message=message)


@router.put('/pages/{page_id}/comments/{comment_id}', response_model=CommentOut)
def edit_comment(
    page_id: str,
    comment_id: str,
    payload: CommentEditRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: CommentStore = Depends(get_comment_store),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> CommentOut:
    comment = require_comment(db, store, page_id, comment_id)
    tokens = session_token_map(request.session)
    if not can_manage_comment(tokens, comment, is_admin=actor.is_admin):
        raise HTTPException(status_code=403, detail='you are not allowed to edit this comment')
    save_token_map(request.session, tokens)

    body, errors = validate_comment_body(payload.body, settings)
    if errors:
        raise HTTPException(status_code=422, detail=errors)

    author = None
    if payload.author is not None:
        author = payload.author.strip()[: settings.comment_author_max_length]
    updated = store.update_body(db, comment.id, body, editor_is_admin=actor.is_admin, author=author)
    if updated is None:
        raise HTTPException(status_code=404, detail='comment not found')

    background_tasks.add_task(
        dispatcher.dispatch,
        build_comment_event(CommentAction.edited, updated, settings, actor=actor.username),
    )
    return comment_out(updated)


@router.delete('/pages/{page_id}/comments/{comment_id}', status_code=204)
def delete_comment(
    page_id: str,
    comment_id: str,
    request: Request,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    actor: Actor = Depends(get_actor),
    store: CommentStore = Depends(get_comment_store),
    dispatcher: EventDispatcher = Depends(get_event_dispatcher),
) -> Response:
    comment = require_comment(db, store, page_id, comment_id)
    tokens = session_token_map(request.session)
    if not can_manage_comment(tokens, comment, is_admin=actor.is_admin):
        raise HTTPException(status_code=403, detail='you are not allowed to delete this comment')

    event = build_comment_event(CommentAction.deleted, comment, settings, actor=actor.username)
    durable_id, legacy_id = comment.id, comment.legacy_id
    if not store.delete(db, durable_id):
        raise HTTPException(status_code=404, detail='comment not found')
    forget_token(tokens, durable_id, legacy_id)
    save_token_map(request.session, tokens)
    background_tasks.add_task(dispatcher.dispatch, event)
    return Response(status_code=204)
