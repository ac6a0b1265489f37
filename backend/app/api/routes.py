from __future__ import annotations

from fastapi import APIRouter

from app.api.routes_comments import router as comments_router
from app.api.routes_moderation import router as moderation_router

router = APIRouter(prefix='/api', tags=['api'])
router.include_router(comments_router)
router.include_router(moderation_router)
