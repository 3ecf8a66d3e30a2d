from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class GroupCreated(BaseModel):
    kind: Literal["group-created"] = "group-created"
    group_id: int
    creator_id: int
    # Group details mirrored into the membership directory
    name: str | None = None
    description: str | None = None
    topic: str | None = None
    course_id: int | None = None
    course_name: str | None = None
    visibility: str = "OPEN"
    max_size: int = Field(default=10, gt=0)
    created_at: datetime | None = None


class MemberJoined(BaseModel):
    kind: Literal["member-joined"] = "member-joined"
    group_id: int
    user_id: int


class MemberLeft(BaseModel):
    kind: Literal["member-left"] = "member-left"
    group_id: int
    user_id: int


class ProfileUpdated(BaseModel):
    kind: Literal["profile-updated"] = "profile-updated"
    user_id: int


class GroupDeleted(BaseModel):
    kind: Literal["group-deleted"] = "group-deleted"
    group_id: int


DomainEvent = Annotated[
    Union[GroupCreated, MemberJoined, MemberLeft, ProfileUpdated, GroupDeleted],
    Field(discriminator="kind"),
]
