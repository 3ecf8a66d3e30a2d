from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from studymatch.core.exceptions import InvalidInputError
from studymatch.models.feed import FeedPage
from studymatch.services.bundle import ServiceBundle, get_bundle

router = APIRouter(prefix="/users/{user_id}", tags=["feed"])


@router.get("/feed", response_model=FeedPage)
async def get_feed(
    user_id: int,
    offset: int = Query(default=0, ge=0),
    services: ServiceBundle = Depends(get_bundle),
):
    """One page of the personalized feed. The quiz reminder only shows on the first page."""
    try:
        return await services.feed.get_feed_page(user_id, offset=offset)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to build feed for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to build feed")
