from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from studymatch.models.profile import GroupCharacteristicProfile
from studymatch.services.bundle import ServiceBundle, get_bundle

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("/{group_id}/profile", response_model=GroupCharacteristicProfile)
async def group_profile(group_id: int, services: ServiceBundle = Depends(get_bundle)):
    """Stored aggregate of a group, including its balance variance. May lag one event behind."""
    try:
        profile = await services.aggregator.get_profile(group_id)
    except Exception as e:
        logger.exception(f"Failed to load profile for group {group_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load group profile")

    if profile is None:
        raise HTTPException(status_code=404, detail=f"No profile for group {group_id}")
    return profile
