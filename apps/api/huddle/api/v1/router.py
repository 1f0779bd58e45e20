from fastapi import APIRouter

from huddle.api.v1.auth import router as auth_router
from huddle.api.v1.events import router as events_router
from huddle.api.v1.me import router as me_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(events_router)
router.include_router(me_router)
