from collections import defaultdict
from datetime import datetime

from loguru import logger

from studymatch.models.directory import CourseEvent, GroupInfo, SessionInfo
from studymatch.models.events import GroupCreated, GroupDeleted, MemberJoined, MemberLeft


class InMemoryMembershipDirectory:
    """
    Local mirror of group membership and course enrolment.

    Kept current by the membership events received at intake (`apply`) and
    by enrolment updates from the course collaborator.
    """

    def __init__(self) -> None:
        self.groups: dict[int, GroupInfo] = {}
        self.enrollments: dict[int, set[int]] = defaultdict(set)

    def add_group(self, group: GroupInfo) -> GroupInfo:
        self.groups[group.id] = group
        return group

    def remove_group(self, group_id: int) -> None:
        self.groups.pop(group_id, None)

    def enroll(self, user_id: int, *course_ids: int) -> None:
        self.enrollments[user_id].update(course_ids)

    def set_enrollments(self, user_id: int, course_ids: set[int]) -> None:
        self.enrollments[user_id] = set(course_ids)

    def add_member(self, group_id: int, user_id: int) -> None:
        self.groups[group_id].member_ids.add(user_id)

    def remove_member(self, group_id: int, user_id: int) -> None:
        self.groups[group_id].member_ids.discard(user_id)

    def apply(self, event) -> None:
        """Mirror a membership event. Events for unknown groups are logged and ignored."""
        if isinstance(event, GroupCreated):
            group = self.groups.get(event.group_id)
            if group is None:
                group = self.add_group(
                    GroupInfo(
                        id=event.group_id,
                        name=event.name or f"Group {event.group_id}",
                        description=event.description,
                        topic=event.topic,
                        course_id=event.course_id,
                        course_name=event.course_name,
                        visibility=event.visibility,
                        max_size=event.max_size,
                        created_at=event.created_at,
                    )
                )
            group.member_ids.add(event.creator_id)
        elif isinstance(event, (MemberJoined, MemberLeft)):
            if event.group_id not in self.groups:
                logger.warning(f"Membership change for unknown group {event.group_id}, ignoring")
                return
            if isinstance(event, MemberJoined):
                self.add_member(event.group_id, event.user_id)
            else:
                self.remove_member(event.group_id, event.user_id)
        elif isinstance(event, GroupDeleted):
            self.remove_group(event.group_id)

    async def enrolled_course_ids(self, user_id: int) -> set[int]:
        return set(self.enrollments.get(user_id, set()))

    async def groups_of(self, user_id: int) -> list[GroupInfo]:
        return [g for g in self.groups.values() if g.has_member(user_id)]

    async def get_group(self, group_id: int) -> GroupInfo | None:
        return self.groups.get(group_id)

    async def list_groups(self) -> list[GroupInfo]:
        return list(self.groups.values())


class InMemoryEventDirectory:
    def __init__(self, membership: InMemoryMembershipDirectory) -> None:
        self.membership = membership
        self.events: dict[int, CourseEvent] = {}

    def add_event(self, event: CourseEvent) -> CourseEvent:
        self.events[event.id] = event
        return event

    def remove_event(self, event_id: int) -> None:
        self.events.pop(event_id, None)

    async def upcoming_events_for_user(self, user_id: int, now: datetime) -> list[CourseEvent]:
        group_ids = {g.id for g in await self.membership.groups_of(user_id)}
        return [e for e in self.events.values() if e.group_id in group_ids and e.start_time > now]


class InMemorySessionDirectory:
    def __init__(self) -> None:
        self.sessions: dict[int, SessionInfo] = {}
        self.registrations: dict[int, set[int]] = defaultdict(set)

    def add_session(self, session: SessionInfo) -> SessionInfo:
        self.sessions[session.id] = session
        return session

    def register(self, session_id: int, user_id: int) -> None:
        self.registrations[session_id].add(user_id)

    def unregister(self, session_id: int, user_id: int) -> None:
        self.registrations[session_id].discard(user_id)

    async def list_sessions(self) -> list[SessionInfo]:
        return list(self.sessions.values())

    async def registered_sessions(self, user_id: int) -> list[SessionInfo]:
        return [s for sid, s in self.sessions.items() if user_id in self.registrations.get(sid, set())]

    async def is_registered(self, session_id: int, user_id: int) -> bool:
        return user_id in self.registrations.get(session_id, set())


class InMemoryTopicDirectory:
    def __init__(self) -> None:
        self.topics: dict[int, set[str]] = defaultdict(set)

    def set_topics(self, user_id: int, *names: str) -> None:
        self.topics[user_id] = set(names)

    async def topic_names(self, user_id: int) -> set[str]:
        return set(self.topics.get(user_id, set()))
