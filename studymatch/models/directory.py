"""
Read-only records supplied by the membership, event and session collaborators.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class GroupInfo(BaseModel):
    id: int
    name: str
    description: str | None = None
    topic: str | None = None
    course_id: int | None = None
    course_name: str | None = None
    visibility: str = "OPEN"  # OPEN, APPROVAL or PRIVATE
    max_size: int = 10
    member_ids: set[int] = Field(default_factory=set)
    created_at: datetime | None = None

    @property
    def current_size(self) -> int:
        return len(self.member_ids)

    @property
    def is_full(self) -> bool:
        return self.current_size >= self.max_size

    def has_member(self, user_id: int) -> bool:
        return user_id in self.member_ids


class CourseEvent(BaseModel):
    id: int
    title: str
    event_type: str | None = None
    description: str | None = None
    location: str | None = None
    meeting_link: str | None = None
    start_time: datetime
    end_time: datetime | None = None
    group_id: int | None = None
    group_name: str | None = None


class SessionStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class SessionInfo(BaseModel):
    id: int
    title: str
    expert_name: str | None = None
    course_id: int | None = None
    course_name: str | None = None
    # Student who requested the session, if any
    created_by: int | None = None
    scheduled_start: datetime
    status: SessionStatus = SessionStatus.SCHEDULED
    is_cancelled: bool = False
    max_participants: int = 10
    current_participants: int = 0
    topics: list[str] = Field(default_factory=list)

    @property
    def available_spots(self) -> int:
        return self.max_participants - self.current_participants

    @property
    def is_open(self) -> bool:
        return self.status == SessionStatus.SCHEDULED and not self.is_cancelled
