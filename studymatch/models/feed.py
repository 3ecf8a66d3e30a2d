from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from studymatch.models.profile import QuizStatus


class FeedItemBase(BaseModel):
    priority: int
    timestamp: datetime


class QuizReminderItem(FeedItemBase):
    item_type: Literal["QUIZ_REMINDER"] = "QUIZ_REMINDER"
    quiz_message: str
    quiz_status: QuizStatus
    reliability_percentage: float = 0.0


class UpcomingEventItem(FeedItemBase):
    item_type: Literal["UPCOMING_EVENT"] = "UPCOMING_EVENT"
    event_id: int
    event_title: str
    event_type: str | None = None
    event_description: str | None = None
    event_location: str | None = None
    event_meeting_link: str | None = None
    event_start_time: datetime
    event_end_time: datetime | None = None
    group_id: int | None = None
    group_name: str | None = None


class GroupMatchItem(FeedItemBase):
    item_type: Literal["GROUP_MATCH"] = "GROUP_MATCH"
    group_id: int
    group_name: str
    course_name: str | None = None
    match_percentage: int
    match_reason: str
    current_size: int
    max_size: int


class RegisteredSessionItem(FeedItemBase):
    item_type: Literal["REGISTERED_SESSION"] = "REGISTERED_SESSION"
    session_id: int
    session_title: str
    expert_name: str
    course_name: str
    scheduled_at: datetime
    available_spots: int
    current_size: int
    is_registered: bool = True


class RecommendedSessionItem(FeedItemBase):
    item_type: Literal["RECOMMENDED_SESSION"] = "RECOMMENDED_SESSION"
    session_id: int
    session_title: str
    expert_name: str
    course_name: str
    scheduled_at: datetime
    available_spots: int
    topic_match_percentage: int
    is_registered: bool = False


FeedItem = Annotated[
    Union[QuizReminderItem, UpcomingEventItem, GroupMatchItem, RegisteredSessionItem, RecommendedSessionItem],
    Field(discriminator="item_type"),
]


class ProfileSummary(BaseModel):
    has_profile: bool
    message: str


class FeedPage(BaseModel):
    items: list[FeedItem] = Field(default_factory=list)
    profile_summary: ProfileSummary
    offset: int = 0
    page_size: int = 4
    total_available: int = 0
