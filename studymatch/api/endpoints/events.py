from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from studymatch.models.events import DomainEvent
from studymatch.services.bundle import ServiceBundle, get_bundle

router = APIRouter(prefix="/events", tags=["events"])

event_adapter: TypeAdapter = TypeAdapter(DomainEvent)


@router.post("/{kind}", status_code=202)
async def publish_event(
    kind: str,
    payload: dict[str, Any] | None = Body(default=None),
    services: ServiceBundle = Depends(get_bundle),
) -> dict[str, str]:
    """
    Entry point for membership collaborators: group-created, member-joined,
    member-left, profile-updated and group-deleted. Membership changes are
    mirrored locally right away; aggregate recomputation is asynchronous.
    """
    try:
        event = event_adapter.validate_python({**(payload or {}), "kind": kind})
    except ValidationError as e:
        logger.warning(f"Rejected {kind} event: {e}")
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    services.ingest(event)
    return {"status": "accepted", "kind": kind}
