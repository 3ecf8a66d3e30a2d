from fastapi import APIRouter

from .endpoints.admin_quiz import router as admin_quiz_router
from .endpoints.directory import router as directory_router
from .endpoints.events import router as events_router
from .endpoints.feed import router as feed_router
from .endpoints.groups import router as groups_router
from .endpoints.health import router as health_router
from .endpoints.matching import router as matching_router
from .endpoints.quiz import router as quiz_router

api_router = APIRouter()


@api_router.get("/")
async def root():
    return {"message": "StudyMatch API is running"}


api_router.include_router(health_router)
api_router.include_router(quiz_router)
api_router.include_router(feed_router)
api_router.include_router(matching_router)
api_router.include_router(groups_router)
api_router.include_router(events_router)
api_router.include_router(directory_router)
api_router.include_router(admin_quiz_router)
