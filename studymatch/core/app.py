from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from studymatch.api.main import api_router
from studymatch.services.bundle import bundle

from .config import settings
from .version import __version__


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events (startup/shutdown).
    """
    bundle.start()
    logger.info(f"{settings.APP_NAME} {__version__} started ({settings.STORE_BACKEND} store backend)")
    yield
    try:
        await bundle.close()
        logger.info("Background workers stopped and connections closed")
    except Exception as exc:
        logger.warning(f"Failed to shut down services cleanly: {exc}")


app = FastAPI(
    title=settings.APP_NAME,
    description="Study group matching and personalized activity feed",
    version=__version__,
    lifespan=lifespan,
    docs_url=None if settings.APP_ENV != "development" else "/docs",
    redoc_url=None if settings.APP_ENV != "development" else "/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)
