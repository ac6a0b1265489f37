from __future__ import annotations

import argparse
import logging
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.page import Page
from app.utils.timezone import utc_now

LOGGER = logging.getLogger(__name__)


def init_db() -> None:
    """Create the pages and comments tables when they are missing."""
    Base.metadata.create_all(bind=engine)


def ensure_page(session: Session, slug: str, title: str = '', tags: list[str] | None = None) -> Page:
    # Pages belong to the wiki; this only seeds local databases.
    page = session.execute(select(Page).where(Page.slug == slug)).scalar_one_or_none()
    if page is not None:
        return page
    page = Page(
        id=uuid4().hex,
        slug=slug,
        title=title or slug,
        tags_csv=','.join(tags or []),
        created_at=utc_now(),
    )
    session.add(page)
    session.commit()
    LOGGER.info('seeded page %s (%s)', page.slug, page.id)
    return page


def main() -> None:
    parser = argparse.ArgumentParser(description='Create tables and optionally seed pages.')
    parser.add_argument('--page', action='append', default=[], metavar='SLUG', help='page slug to create')
    parser.add_argument('--tags', default='', help='comma separated tags for seeded pages')
    args = parser.parse_args()

    init_db()
    tags = [tag.strip() for tag in args.tags.split(',') if tag.strip()]
    with SessionLocal() as session:
        for slug in args.page:
            page = ensure_page(session, slug, tags=tags)
            print(f'{page.slug} -> {page.id}')


if __name__ == '__main__':
    from app.core.logging import configure_logging

    configure_logging()
    main()
