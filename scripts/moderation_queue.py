from __future__ import annotations

import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
BACKEND_ROOT = ROOT / 'backend'
sys.path.insert(0, str(BACKEND_ROOT))

from app.api.deps import get_comment_store
from app.core.logging import configure_logging
from app.db.session import SessionLocal
from app.schemas.common import CommentStatus
from app.utils.text import body_preview


def list_queue(status: CommentStatus, limit: int | None) -> None:
    store = get_comment_store()
    with SessionLocal() as session:
        rows = store.list_by_status(session, status, limit=limit)
        for row in rows:
            print(f'{row.id}  page={row.page_id}  author={row.author or "-"}  {body_preview(row.body, 80)}')
        print(f'{len(rows)} comment(s) {status.value}')


def moderate(comment_id: str, status: CommentStatus) -> None:
    store = get_comment_store()
    with SessionLocal() as session:
        comment = store.set_status(session, comment_id, status)
        if comment is None:
            raise SystemExit(f'comment not found: {comment_id}')
        print(f'{comment.id} -> {comment.status}')


def main() -> None:
    parser = argparse.ArgumentParser(description='Inspect and work through the comment moderation queue.')
    sub = parser.add_subparsers(dest='command', required=True)

    list_cmd = sub.add_parser('list', help='list comments awaiting a decision')
    list_cmd.add_argument('--status', choices=[s.value for s in CommentStatus], default=CommentStatus.pending.value)
    list_cmd.add_argument('--limit', type=int, default=None)

    for name in ('approve', 'reject'):
        cmd = sub.add_parser(name, help=f'{name} a comment by id')
        cmd.add_argument('comment_id')

    args = parser.parse_args()
    configure_logging()

    if args.command == 'list':
        list_queue(CommentStatus(args.status), args.limit)
    elif args.command == 'approve':
        moderate(args.comment_id, CommentStatus.approved)
    else:
        moderate(args.comment_id, CommentStatus.rejected)


if __name__ == '__main__':
    main()
