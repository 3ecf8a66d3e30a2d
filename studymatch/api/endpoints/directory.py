from fastapi import APIRouter, Body, Depends, HTTPException, Response
from loguru import logger

from studymatch.models.directory import CourseEvent, SessionInfo
from studymatch.services.bundle import ServiceBundle, get_bundle

router = APIRouter(prefix="/directory", tags=["directory"])


@router.put("/users/{user_id}/courses", status_code=204)
async def set_enrollments(
    user_id: int, course_ids: list[int] = Body(...), services: ServiceBundle = Depends(get_bundle)
):
    """Replace the user's enrolled courses."""
    services.membership.set_enrollments(user_id, set(course_ids))
    logger.info(f"User {user_id} enrolled in {len(course_ids)} courses")
    return Response(status_code=204)


@router.put("/users/{user_id}/topics", status_code=204)
async def set_topics(user_id: int, topics: list[str] = Body(...), services: ServiceBundle = Depends(get_bundle)):
    services.topics.set_topics(user_id, *topics)
    logger.info(f"User {user_id} selected {len(topics)} interest topics")
    return Response(status_code=204)


@router.put("/sessions/{session_id}", response_model=SessionInfo)
async def upsert_session(session_id: int, session: SessionInfo, services: ServiceBundle = Depends(get_bundle)):
    if session.id != session_id:
        raise HTTPException(status_code=400, detail=f"Session id mismatch: {session.id} != {session_id}")
    logger.debug(f"Upserting session {session_id}")
    return services.sessions.add_session(session)


@router.put("/sessions/{session_id}/registrations/{user_id}", status_code=204)
async def register(session_id: int, user_id: int, services: ServiceBundle = Depends(get_bundle)):
    if session_id not in services.sessions.sessions:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    services.sessions.register(session_id, user_id)
    return Response(status_code=204)


@router.delete("/sessions/{session_id}/registrations/{user_id}", status_code=204)
async def unregister(session_id: int, user_id: int, services: ServiceBundle = Depends(get_bundle)):
    services.sessions.unregister(session_id, user_id)
    return Response(status_code=204)


@router.put("/events/{event_id}", response_model=CourseEvent)
async def upsert_event(event_id: int, event: CourseEvent, services: ServiceBundle = Depends(get_bundle)):
    if event.id != event_id:
        raise HTTPException(status_code=400, detail=f"Event id mismatch: {event.id} != {event_id}")
    logger.debug(f"Upserting event {event_id} for group {event.group_id}")
    return services.events.add_event(event)


@router.delete("/events/{event_id}", status_code=204)
async def remove_event(event_id: int, services: ServiceBundle = Depends(get_bundle)):
    services.events.remove_event(event_id)
    return Response(status_code=204)
