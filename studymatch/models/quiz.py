from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from studymatch.models.profile import QuizStatus, utcnow
from studymatch.models.roles import RoleType


class QuizOption(BaseModel):
    id: int
    question_id: int
    text: str
    order_index: int = 0
    # Each option may feed several roles at different strengths
    role_weights: dict[RoleType, float] = Field(default_factory=dict)


class QuizQuestion(BaseModel):
    id: int
    text: str
    order_index: int = 0
    active: bool = True
    options: list[QuizOption] = Field(default_factory=list)

    def find_option(self, option_id: int) -> QuizOption | None:
        return next((opt for opt in self.options if opt.id == option_id), None)

    def sorted_options(self) -> list[QuizOption]:
        return sorted(self.options, key=lambda opt: opt.order_index)


class QuizAnswer(BaseModel):
    question_id: int
    option_id: int
    answered_at: datetime = Field(default_factory=utcnow)


class QuizConfig(BaseModel):
    # Ordered subset of question ids served to users; empty means all active questions
    selected_question_ids: list[int] = Field(default_factory=list)
    updated_at: datetime = Field(default_factory=utcnow)


# --- request/response shapes ---


class OptionResponse(BaseModel):
    option_id: int
    option_text: str
    order_index: int


class QuestionResponse(BaseModel):
    question_id: int
    question_text: str
    order_index: int
    options: list[OptionResponse]


class QuizSubmission(BaseModel):
    answers: dict[int, int] = Field(default_factory=dict, description="question id -> selected option id")


class ProfileResponse(BaseModel):
    user_id: int
    message: str
    quiz_status: QuizStatus
    reliability_percentage: float
    requires_onboarding: bool
    dominant_role: RoleType | None = None


class OptionInput(BaseModel):
    text: str
    order_index: int = 0
    role_weights: dict[RoleType, float] = Field(default_factory=dict)

    @field_validator("role_weights")
    @classmethod
    def _non_negative(cls, weights: dict[RoleType, float]) -> dict[RoleType, float]:
        for role, weight in weights.items():
            if weight < 0:
                raise ValueError(f"Role weight for {role.value} must not be negative")
        return weights


class QuestionCreate(BaseModel):
    text: str
    order_index: int = 0
    options: list[OptionInput] = Field(default_factory=list)


class QuestionUpdate(BaseModel):
    text: str
    order_index: int = 0
    active: bool | None = None
    options: list[OptionInput] | None = None


class QuizConfigUpdate(BaseModel):
    selected_question_ids: list[int] = Field(default_factory=list)
