from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

from studymatch.models.roles import RoleType, RoleVector


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"


class CharacteristicProfile(BaseModel):
    """
    Per-user role fingerprint used for matching.

    Created lazily on the first quiz answer or skip, mutated only by the
    quiz service and never deleted.
    """

    user_id: int
    role_vector: RoleVector = Field(default_factory=RoleVector)
    quiz_status: QuizStatus = QuizStatus.NOT_STARTED
    total_questions: int = Field(default=0, ge=0)
    answered_questions: int = Field(default=0, ge=0)
    reliability_percentage: float = Field(default=0.0, ge=0.0, le=1.0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def requires_onboarding(self) -> bool:
        return self.quiz_status == QuizStatus.NOT_STARTED

    def update_reliability(self) -> None:
        """Reliability is the answered fraction of the quiz (0 when skipped)."""
        if self.quiz_status in (QuizStatus.SKIPPED, QuizStatus.NOT_STARTED) or self.total_questions <= 0:
            self.reliability_percentage = 0.0
            return
        self.reliability_percentage = min(1.0, self.answered_questions / self.total_questions)

    def dominant_role(self) -> RoleType | None:
        """Highest-scoring role, once the user has answered part of the quiz."""
        if self.quiz_status not in (QuizStatus.IN_PROGRESS, QuizStatus.COMPLETED):
            return None
        return self.role_vector.dominant_role()


class GroupCharacteristicProfile(BaseModel):
    """
    Materialized aggregate of a group's member profiles.

    Always replaced wholesale by a recomputation; may lag one event behind
    the actual membership.
    """

    group_id: int
    average_role_vector: RoleVector = Field(default_factory=RoleVector)
    # Population variance averaged over all roles; diagnostic only
    current_variance: float = Field(default=0.0, ge=0.0)
    member_count: int = Field(default=0, ge=0, description="Members with a characteristic profile")
    last_updated_at: datetime = Field(default_factory=utcnow)
