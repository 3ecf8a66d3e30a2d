"""
Pytest Configuration and Fixtures.

Every service is wired to in-memory stores and collaborator directories,
a fixed clock and a seeded random generator.
"""

import random
from datetime import datetime, timezone

import pytest

from studymatch.models.directory import GroupInfo
from studymatch.models.profile import CharacteristicProfile, QuizStatus
from studymatch.models.quiz import QuizOption, QuizQuestion
from studymatch.models.roles import RoleType, RoleVector
from studymatch.services.directory.memory import (
    InMemoryEventDirectory,
    InMemoryMembershipDirectory,
    InMemorySessionDirectory,
    InMemoryTopicDirectory,
)
from studymatch.services.events.dispatcher import EventDispatcher
from studymatch.services.matching.aggregator import GroupProfileAggregator
from studymatch.services.matching.engine import MatchingEngine
from studymatch.services.quiz.admin import QuizAdminService
from studymatch.services.quiz.service import QuizService
from studymatch.services.stores.memory import InMemoryGroupProfileStore, InMemoryProfileStore, InMemoryQuestionBank

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def build_questions() -> list[QuizQuestion]:
    """Three questions, two options each; some options weight several roles."""
    return [
        QuizQuestion(
            id=1,
            text="The group has a deadline next week. You...",
            order_index=1,
            options=[
                QuizOption(
                    id=11,
                    question_id=1,
                    text="Take charge and split the work",
                    order_index=1,
                    role_weights={RoleType.LEADER: 1.0, RoleType.COMMUNICATOR: 0.5},
                ),
                QuizOption(
                    id=12, question_id=1, text="Draft a schedule", order_index=2, role_weights={RoleType.PLANNER: 1.0}
                ),
            ],
        ),
        QuizQuestion(
            id=2,
            text="A teammate is stuck on a hard problem. You...",
            order_index=2,
            options=[
                QuizOption(
                    id=21, question_id=2, text="Explain the theory", order_index=1, role_weights={RoleType.EXPERT: 1.0}
                ),
                QuizOption(
                    id=22,
                    question_id=2,
                    text="Suggest an unusual approach",
                    order_index=2,
                    role_weights={RoleType.CREATIVE: 1.0, RoleType.CHALLENGER: 0.5},
                ),
            ],
        ),
        QuizQuestion(
            id=3,
            text="The group disagrees on a plan. You...",
            order_index=3,
            options=[
                QuizOption(
                    id=31, question_id=3, text="Find a compromise", order_index=1, role_weights={RoleType.TEAM_PLAYER: 1.0}
                ),
                QuizOption(
                    id=32,
                    question_id=3,
                    text="Question the assumptions",
                    order_index=2,
                    role_weights={RoleType.LEADER: 0.5, RoleType.CHALLENGER: 1.0},
                ),
            ],
        ),
    ]


def role_vector(default: float = 0.0, **scores: float) -> RoleVector:
    """role_vector(0.1, leader=0.9) -> LEADER 0.9, every other role 0.1."""
    values = {role: default for role in RoleType}
    for name, value in scores.items():
        values[RoleType[name.upper()]] = value
    return RoleVector(scores=values)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def questions():
    return build_questions()


@pytest.fixture
def profile_store():
    return InMemoryProfileStore()


@pytest.fixture
def group_store():
    return InMemoryGroupProfileStore()


@pytest.fixture
def question_bank(questions):
    return InMemoryQuestionBank(questions)


@pytest.fixture
def membership():
    return InMemoryMembershipDirectory()


@pytest.fixture
def event_directory(membership):
    return InMemoryEventDirectory(membership)


@pytest.fixture
def session_directory():
    return InMemorySessionDirectory()


@pytest.fixture
def topic_directory():
    return InMemoryTopicDirectory()


@pytest.fixture
async def dispatcher():
    dispatcher = EventDispatcher(workers=1, maxsize=100)
    yield dispatcher
    await dispatcher.stop()


@pytest.fixture
def aggregator(group_store, profile_store, membership, clock):
    return GroupProfileAggregator(group_store, profile_store, membership, clock=clock)


@pytest.fixture
def quiz_service(question_bank, profile_store, dispatcher, clock):
    return QuizService(question_bank, profile_store, dispatcher, clock=clock)


@pytest.fixture
def quiz_admin(question_bank, clock):
    return QuizAdminService(question_bank, clock=clock)


@pytest.fixture
def engine(profile_store, group_store, membership):
    return MatchingEngine(profile_store, group_store, membership, top_limit=10)


@pytest.fixture
def make_profile(profile_store):
    """Store a characteristic profile built from keyword role scores."""

    async def _make(user_id: int, default: float = 0.0, status: QuizStatus = QuizStatus.COMPLETED, **scores):
        profile = CharacteristicProfile(
            user_id=user_id,
            role_vector=role_vector(default, **scores),
            quiz_status=status,
            total_questions=3,
            answered_questions=3 if status == QuizStatus.COMPLETED else 1,
            created_at=NOW,
            updated_at=NOW,
        )
        profile.update_reliability()
        await profile_store.save_profile(profile)
        return profile

    return _make


@pytest.fixture
def make_group(membership):
    """Register a group with the membership directory."""

    def _make(
        group_id: int,
        course_id: int = 1,
        members: tuple[int, ...] = (),
        max_size: int = 5,
        visibility: str = "OPEN",
        name: str | None = None,
    ) -> GroupInfo:
        return membership.add_group(
            GroupInfo(
                id=group_id,
                name=name or f"Group {group_id}",
                course_id=course_id,
                course_name=f"Course {course_id}",
                visibility=visibility,
                max_size=max_size,
                member_ids=set(members),
                created_at=NOW,
            )
        )

    return _make
