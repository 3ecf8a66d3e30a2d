from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query
from loguru import logger

from studymatch.core.exceptions import NotFoundError
from studymatch.models.matching import GroupRecommendation
from studymatch.services.bundle import ServiceBundle, get_bundle

router = APIRouter(prefix="/users/{user_id}/matches", tags=["matching"])


@router.get("", response_model=list[GroupRecommendation])
async def top_matches(user_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.matching.rank_groups_for_student(user_id)
    except Exception as e:
        logger.exception(f"Failed to rank groups for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to rank groups")


@router.get("/browse", response_model=list[GroupRecommendation])
async def browse_matches(
    user_id: int,
    course_id: int | None = None,
    visibility: str | None = Query(default=None, description="OPEN, APPROVAL, PRIVATE or all"),
    availability: Literal["available", "full", "all"] | None = None,
    services: ServiceBundle = Depends(get_bundle),
):
    try:
        return await services.matching.list_all_matches(
            user_id, course_id=course_id, visibility=visibility, availability=availability
        )
    except Exception as e:
        logger.exception(f"Failed to browse groups for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to browse groups")


@router.get("/{group_id}", response_model=GroupRecommendation)
async def group_match(user_id: int, group_id: int, services: ServiceBundle = Depends(get_bundle)):
    try:
        return await services.matching.score_specific_group(group_id, user_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.exception(f"Failed to score group {group_id} for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to score group")
