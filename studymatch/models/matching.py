from pydantic import BaseModel


class GroupRecommendation(BaseModel):
    """A scored candidate group for one student."""

    group_id: int
    group_name: str
    description: str | None = None
    topic: str | None = None
    visibility: str | None = None
    course_id: int | None = None
    course_name: str | None = None
    current_size: int
    max_size: int
    match_percentage: int
    match_reason: str
    is_member: bool = False
    # Stored balance variance of the group; informational, not used for ranking
    current_variance: float | None = None
