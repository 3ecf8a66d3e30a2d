import math
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class RoleType(str, Enum):
    """The seven collaboration archetypes a person or group is profiled on."""

    LEADER = "LEADER"
    PLANNER = "PLANNER"
    EXPERT = "EXPERT"
    CREATIVE = "CREATIVE"
    COMMUNICATOR = "COMMUNICATOR"
    TEAM_PLAYER = "TEAM_PLAYER"
    CHALLENGER = "CHALLENGER"


def clamp_unit(value: float | None) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, float(value)))


class RoleVector(BaseModel):
    """
    Dense 7-dimensional role profile.

    Every RoleType is always present and every value lies in [0, 1];
    missing roles default to 0.0 and out-of-range values are clamped on
    construction. Arithmetic helpers return new vectors.
    """

    scores: dict[RoleType, float] = Field(default_factory=dict)

    @field_validator("scores", mode="after")
    @classmethod
    def _fill_and_clamp(cls, scores: dict[RoleType, float]) -> dict[RoleType, float]:
        return {role: clamp_unit(scores.get(role, 0.0)) for role in RoleType}

    @classmethod
    def zeros(cls) -> "RoleVector":
        return cls()

    def get(self, role: RoleType) -> float:
        return self.scores.get(role, 0.0)

    def as_list(self) -> list[float]:
        """Values in RoleType declaration order."""
        return [self.get(role) for role in RoleType]

    def norm(self) -> float:
        return math.sqrt(sum(v * v for v in self.as_list()))

    def dot(self, other: "RoleVector") -> float:
        return sum(self.get(role) * other.get(role) for role in RoleType)

    def complement(self) -> "RoleVector":
        """What is missing: 1 - value for every role."""
        return RoleVector(scores={role: 1.0 - self.get(role) for role in RoleType})

    def is_zero(self) -> bool:
        return all(v == 0.0 for v in self.as_list())

    def dominant_role(self) -> RoleType:
        """Highest-scoring role; ties go to TEAM_PLAYER, then declaration order."""
        dominant = RoleType.TEAM_PLAYER
        max_score = self.get(RoleType.TEAM_PLAYER)
        for role in RoleType:
            if self.get(role) > max_score:
                max_score = self.get(role)
                dominant = role
        return dominant

    def get_top_roles(self, limit: int = 3) -> list[tuple[RoleType, float]]:
        """Return top N roles by score."""
        return sorted(self.scores.items(), key=lambda x: x[1], reverse=True)[:limit]
