"""
Contracts of the collaborators the matching core reads from.

Group/course CRUD, event scheduling and session booking live outside this
service; these protocols describe only what the core consumes.
"""

from datetime import datetime
from typing import Protocol

from studymatch.models.directory import CourseEvent, GroupInfo, SessionInfo


class MembershipDirectory(Protocol):
    async def enrolled_course_ids(self, user_id: int) -> set[int]: ...

    async def groups_of(self, user_id: int) -> list[GroupInfo]: ...

    async def get_group(self, group_id: int) -> GroupInfo | None: ...

    async def list_groups(self) -> list[GroupInfo]: ...


class EventDirectory(Protocol):
    async def upcoming_events_for_user(self, user_id: int, now: datetime) -> list[CourseEvent]:
        """Events of the user's groups that start after `now`."""
        ...


class SessionDirectory(Protocol):
    async def list_sessions(self) -> list[SessionInfo]: ...

    async def registered_sessions(self, user_id: int) -> list[SessionInfo]: ...

    async def is_registered(self, session_id: int, user_id: int) -> bool: ...


class TopicDirectory(Protocol):
    async def topic_names(self, user_id: int) -> set[str]: ...
