from app.models.comment import Comment
from app.models.page import Page

__all__ = [
    'Comment',
    'Page',
]
