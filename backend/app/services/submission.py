from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, Sequence

from app.core.config import Settings

ANONYMOUS_LABEL = 'Anonymous'


@dataclass(slots=True, frozen=True)
class Actor:
    """Capability flags handed over by the role component for one request."""

    username: str | None = None
    is_admin: bool = False
    can_comment: bool = True
    can_moderate: bool = False
    is_privileged: bool = False

    @property
    def may_moderate(self) -> bool:
        return self.is_admin or self.can_moderate


def actor_from_session(user: Mapping[str, Any] | None, settings: Settings) -> Actor:
    if not user:
        return Actor(can_comment=settings.anonymous_can_comment)
    is_admin = bool(user.get('is_admin'))
    return Actor(
        username=user.get('username') or None,
        is_admin=is_admin,
        can_comment=is_admin or bool(user.get('can_comment', True)),
        can_moderate=is_admin or bool(user.get('can_moderate')),
        is_privileged=is_admin or bool(user.get('is_privileged')),
    )


@dataclass(slots=True)
class BanRecord:
    reason: str
    scope: str = 'global'
    tags: list[str] = field(default_factory=list)


class RateLimiter(Protocol):
    def allow(self, identity: str) -> bool: ...


class BanChecker(Protocol):
    def find_ban(self, origin_address: str | None, action: str, page_tags: Sequence[str]) -> BanRecord | None: ...


class CaptchaVerifier(Protocol):
    def verify(self, answer: str) -> bool: ...


class AllowAllRateLimiter:
    def allow(self, identity: str) -> bool:
        return True


class NoBanChecker:
    def find_ban(self, origin_address: str | None, action: str, page_tags: Sequence[str]) -> BanRecord | None:
        return None


class AcceptingCaptchaVerifier:
    def verify(self, answer: str) -> bool:
        return True


@dataclass(slots=True)
class SubmissionForm:
    author: str = ''
    body: str = ''
    captcha: str = ''
    honeypot: str = ''


@dataclass(slots=True)
class ValidatedSubmission:
    author: str
    body: str
    errors: list[str]

    @property
    def ok(self) -> bool:
        return not self.errors


def clean_author(raw: str | None, settings: Settings) -> str:
    return (raw or '').strip()[: settings.comment_author_max_length]


def validate_comment_body(raw: str | None, settings: Settings) -> tuple[str, list[str]]:
    body = (raw or '').strip()
    errors: list[str] = []
    if not body:
        errors.append('Message is required.')
    elif len(body) < settings.comment_body_min_length:
        errors.append(f'Message must be at least {settings.comment_body_min_length} characters.')
    elif len(body) > settings.comment_body_max_length:
        errors.append(f'Message is too long ({settings.comment_body_max_length} characters max).')
    return body, errors


def validate_comment_submission(
    form: SubmissionForm,
    settings: Settings,
    captcha_verifier: CaptchaVerifier,
) -> ValidatedSubmission:
    author = clean_author(form.author, settings)
    body, errors = validate_comment_body(form.body, settings)
    if form.honeypot.strip():
        errors.append('Invalid submission.')
    if not captcha_verifier.verify(form.captcha.strip()):
        errors.append('Please answer the anti-spam question correctly.')
    return ValidatedSubmission(author=author, body=body, errors=errors)
