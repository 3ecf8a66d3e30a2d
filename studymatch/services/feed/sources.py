from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from loguru import logger

from studymatch.core.config import settings
from studymatch.core.constants import (
    ENROLLED_COURSE_SESSION_FLOOR,
    PRIORITY_GROUP_MATCH,
    PRIORITY_RECOMMENDED_SESSION,
    PRIORITY_REGISTERED_SESSION,
    PRIORITY_UPCOMING_EVENT,
)
from studymatch.models.directory import SessionInfo, SessionStatus
from studymatch.models.feed import GroupMatchItem, RecommendedSessionItem, RegisteredSessionItem, UpcomingEventItem
from studymatch.services.directory.base import EventDirectory, MembershipDirectory, SessionDirectory, TopicDirectory
from studymatch.services.feed.topics import topic_match_score
from studymatch.services.matching.engine import MatchingEngine

DEFAULT_EXPERT_NAME = "Expert"
DEFAULT_COURSE_NAME = "General"


class FeedSource(ABC):
    """
    One feed category. Each source returns its own items already sorted by
    its own rule and capped; sources are never compared with each other.
    """

    name: str = "source"

    def __init__(self, limit: int | None = None):
        self.limit = limit or settings.FEED_CATEGORY_LIMIT

    @abstractmethod
    async def collect(self, user_id: int, now: datetime) -> list:
        pass


class UpcomingEventSource(FeedSource):
    """Events of the user's groups within the event window, soonest first."""

    name = "events"

    def __init__(self, events: EventDirectory, window_days: int | None = None, limit: int | None = None):
        super().__init__(limit)
        self.events = events
        self.window = timedelta(days=window_days or settings.FEED_EVENT_WINDOW_DAYS)

    async def collect(self, user_id: int, now: datetime) -> list[UpcomingEventItem]:
        horizon = now + self.window
        upcoming = await self.events.upcoming_events_for_user(user_id, now)
        in_window = sorted((e for e in upcoming if now < e.start_time < horizon), key=lambda e: e.start_time)

        return [
            UpcomingEventItem(
                priority=PRIORITY_UPCOMING_EVENT,
                timestamp=event.start_time,
                event_id=event.id,
                event_title=event.title,
                event_type=event.event_type,
                event_description=event.description,
                event_location=event.location,
                event_meeting_link=event.meeting_link,
                event_start_time=event.start_time,
                event_end_time=event.end_time,
                group_id=event.group_id,
                group_name=event.group_name,
            )
            for event in in_window[: self.limit]
        ]


class GroupMatchSource(FeedSource):
    """Ranked group recommendations with open capacity, best match first."""

    name = "group_matches"

    def __init__(self, engine: MatchingEngine, limit: int | None = None):
        super().__init__(limit)
        self.engine = engine

    async def collect(self, user_id: int, now: datetime) -> list[GroupMatchItem]:
        matches = await self.engine.rank_groups_for_student(user_id)
        open_matches = [m for m in matches if m.current_size < m.max_size]
        open_matches.sort(key=lambda m: m.match_percentage, reverse=True)

        return [
            GroupMatchItem(
                priority=PRIORITY_GROUP_MATCH,
                timestamp=now,
                group_id=match.group_id,
                group_name=match.group_name,
                course_name=match.course_name,
                match_percentage=match.match_percentage,
                match_reason=match.match_reason,
                current_size=match.current_size,
                max_size=match.max_size,
            )
            for match in open_matches[: self.limit]
        ]


class RegisteredSessionSource(FeedSource):
    """Future scheduled sessions the user registered for, soonest first."""

    name = "registered_sessions"

    def __init__(self, sessions: SessionDirectory, limit: int | None = None):
        super().__init__(limit)
        self.sessions = sessions

    async def collect(self, user_id: int, now: datetime) -> list[RegisteredSessionItem]:
        registered = [
            s
            for s in await self.sessions.registered_sessions(user_id)
            if s.scheduled_start > now and s.is_open
        ]
        registered.sort(key=lambda s: s.scheduled_start)
        logger.debug(f"Found {len(registered)} upcoming registered sessions for user {user_id}")

        return [
            RegisteredSessionItem(
                priority=PRIORITY_REGISTERED_SESSION,
                timestamp=session.scheduled_start,
                session_id=session.id,
                session_title=session.title,
                expert_name=session.expert_name or DEFAULT_EXPERT_NAME,
                course_name=session.course_name or DEFAULT_COURSE_NAME,
                scheduled_at=session.scheduled_start,
                available_spots=session.available_spots,
                current_size=session.current_participants,
            )
            for session in registered[: self.limit]
        ]


class RecommendedSessionSource(FeedSource):
    """
    Open sessions in the session window scored by topic overlap.

    Sessions in an enrolled course score at least 75 even without topic
    overlap; sessions scoring 0 are dropped.
    """

    name = "recommended_sessions"

    def __init__(
        self,
        sessions: SessionDirectory,
        membership: MembershipDirectory,
        topics: TopicDirectory,
        window_days: int | None = None,
        limit: int | None = None,
    ):
        super().__init__(limit)
        self.sessions = sessions
        self.membership = membership
        self.topics = topics
        self.window = timedelta(days=window_days or settings.FEED_SESSION_WINDOW_DAYS)

    def _is_candidate(self, session: SessionInfo, user_id: int, now: datetime) -> bool:
        if not (now < session.scheduled_start < now + self.window):
            return False
        if session.status != SessionStatus.SCHEDULED or session.is_cancelled:
            return False
        if session.available_spots <= 0:
            return False
        return session.created_by != user_id

    async def collect(self, user_id: int, now: datetime) -> list[RecommendedSessionItem]:
        enrolled = await self.membership.enrolled_course_ids(user_id)
        user_topics = await self.topics.topic_names(user_id)

        scored: list[tuple[int, SessionInfo]] = []
        for session in await self.sessions.list_sessions():
            if not self._is_candidate(session, user_id, now):
                continue
            if await self.sessions.is_registered(session.id, user_id):
                continue

            score = topic_match_score(session, user_topics)
            if session.course_id is not None and session.course_id in enrolled:
                score = max(score, ENROLLED_COURSE_SESSION_FLOOR)
            if score > 0:
                scored.append((score, session))

        scored.sort(key=lambda pair: pair[0], reverse=True)
        logger.debug(f"Found {len(scored)} recommended sessions for user {user_id}")

        return [
            RecommendedSessionItem(
                priority=PRIORITY_RECOMMENDED_SESSION,
                timestamp=session.scheduled_start,
                session_id=session.id,
                session_title=session.title,
                expert_name=session.expert_name or DEFAULT_EXPERT_NAME,
                course_name=session.course_name or DEFAULT_COURSE_NAME,
                scheduled_at=session.scheduled_start,
                available_spots=session.available_spots,
                topic_match_percentage=score,
            )
            for score, session in scored[: self.limit]
        ]
